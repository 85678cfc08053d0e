"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from functest.plugin import functional_context  # noqa: E402,F401


@pytest_asyncio.fixture
async def event_hub():
    """Create a started EventHub."""
    from mobile_core.event_hub import EventHub

    hub = EventHub()
    await hub.start()
    yield hub
    await hub.stop()


@pytest.fixture
def network_mock():
    """Create a NetworkMock with the default unmatched policy."""
    from functest.network import NetworkMock

    return NetworkMock()


@pytest_asyncio.fixture
async def network_service(network_mock):
    """Create a NetworkService routed through the mock."""
    from mobile_core.network import NetworkService

    service = NetworkService(transport=network_mock.transport)
    yield service
    await service.close()


@pytest_asyncio.fixture
async def core(network_mock):
    """Create a started MobileCore routed through the mock."""
    from mobile_core import MobileCore

    mc = MobileCore(transport=network_mock.transport)
    await mc.start()
    yield mc
    await mc.stop()


@pytest.fixture
def config_file(tmp_path):
    """Write a JSON configuration document and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "ADBMobileConfig.json"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
