"""Demo application bootstrap."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from mobile_core import (
    Assurance,
    Edge,
    Identity,
    Lifecycle,
    LogLevel,
    MobileCore,
    Signal,
)
from mobile_core.config import resolve_config_path
from mobile_core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent / "ADBMobileConfig.json"

# Assurance appears twice; the runtime skips the duplicate
EXTENSIONS = [Identity, Lifecycle, Signal, Assurance, Edge, Assurance]
LATE_EXTENSIONS = [Identity, Lifecycle]


class ConfigMode(str, Enum):
    """Where the demo loads its configuration from."""

    INLINE = "inline"
    APP_ID = "app_id"
    FILE = "file"


INLINE_CONFIG = {
    "global.privacy": "optedin",
    "experienceCloud.org": "3E2A28175B8ED3720A495E23@AdobeOrg",
    "edge.configId": "d3d079e7-130e-4ec1-88d7-c328eb9815c4",
}


class IDemoApplication(Protocol):
    """Bootstrap and shutdown."""

    async def start(self) -> None:
        """Register extensions, configure, start the runtime."""
        ...

    async def stop(self) -> None:
        """Stop the runtime."""
        ...


class DemoApplication:
    """Registers every extension, loads configuration and starts a session."""

    def __init__(
        self,
        core: MobileCore | None = None,
        config_mode: ConfigMode | None = None,
        app_id: str | None = None,
        config_file: str | Path | None = None,
        inline_config: dict[str, Any] | None = None,
    ):
        self._core = core or MobileCore()
        self._config_mode = config_mode or ConfigMode(
            os.getenv("DEMO_CONFIG_MODE", ConfigMode.FILE.value)
        )
        self._app_id = app_id if app_id is not None else os.getenv("DEMO_APP_ID", "")
        self._config_file = resolve_config_path(
            config_file or os.getenv("DEMO_CONFIG_FILE"), DEFAULT_CONFIG_FILE
        )
        self._inline_config = inline_config or INLINE_CONFIG

    @property
    def core(self) -> MobileCore:
        return self._core

    async def start(self) -> None:
        """Register extensions, configure, start the runtime."""
        core = self._core
        core.set_log_level(LogLevel.VERBOSE)
        core.log(LogLevel.DEBUG, "DemoApplication", "Testing with Edge.")

        await core.register_extensions(EXTENSIONS)
        self._configure()
        await core.register_extensions(LATE_EXTENSIONS)

        await core.start(lambda: core.lifecycle_start(None))
        logger.info("Demo application started (config mode: %s)", self._config_mode.value)

    def _configure(self) -> None:
        if self._config_mode is ConfigMode.INLINE:
            self._core.update_configuration(self._inline_config)
        elif self._config_mode is ConfigMode.APP_ID:
            if not self._app_id:
                raise ValueError("DEMO_APP_ID must be set for the app_id config mode")
            self._core.configure_with_app_id(self._app_id)
        else:
            self._core.configure_with_file(self._config_file)

    async def stop(self) -> None:
        """Pause the session and stop the runtime."""
        if self._core.started:
            self._core.lifecycle_pause()
            await self._core.wait_idle(1.0)
        await self._core.stop()
