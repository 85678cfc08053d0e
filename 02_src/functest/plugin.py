"""pytest plugin exposing a started FunctionalTestContext per test.

Enable with `pytest_plugins = ["functest.plugin"]` in a conftest.py.
"""

import pytest_asyncio

from .context import FunctionalTestContext


@pytest_asyncio.fixture
async def functional_context():
    """Create a started context and stop it after the test."""
    context = FunctionalTestContext()
    await context.start()
    yield context
    await context.stop()
