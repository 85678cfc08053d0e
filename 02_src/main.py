"""Main entry point for the demo application."""

import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

from demo_app import DemoApplication
from mobile_core.logging_config import setup_logging


async def run(duration: float) -> None:
    """Start the demo, keep it alive for `duration` seconds, stop it."""
    app = DemoApplication()
    await app.start()
    try:
        await asyncio.sleep(duration)
    finally:
        await app.stop()


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    setup_logging()
    duration = float(os.getenv("DEMO_RUN_SECONDS", "2"))

    asyncio.run(run(duration))


if __name__ == "__main__":
    main()
