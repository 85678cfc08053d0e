"""MobileCore: the public facade of the runtime."""

import inspect
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import httpx

from .event_hub import EventHub, EventListener
from .extensions import ConfigurationExtension, Extension, ExtensionApi
from .extensions.configuration import (
    CONFIG_APP_ID,
    CONFIG_FILE_PATH,
    CONFIG_GET_DATA,
    CONFIG_UPDATE,
)
from .extensions.identity import PRIVACY_KEY
from .logging_config import SDK_LOGGER_NAME, LogLevel, get_logger
from .models import Event, EventSource, EventType
from .network import NetworkService

logger = get_logger(__name__)

E = TypeVar("E", bound=Extension)

StartCallback = Callable[[], Awaitable[None] | None]


class IMobileCore(Protocol):
    """Registration, configuration and lifecycle entry points."""

    async def register_extensions(self, extensions: list[type[Extension]]) -> None:
        """Register extension classes in order."""
        ...

    def update_configuration(self, config: dict[str, Any]) -> None:
        """Merge programmatic configuration."""
        ...

    async def start(self, callback: StartCallback | None = None) -> None:
        """Start event delivery, then run the callback."""
        ...

    async def stop(self) -> None:
        """Stop event delivery and release resources."""
        ...


class MobileCore:
    """Owns the EventHub, the NetworkService and the registered extensions."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._hub = EventHub()
        self._network = NetworkService(transport=transport)
        self._extensions: dict[str, Extension] = {}

        # Configuration is always present and announces nothing on registration
        self._configuration = ConfigurationExtension(self._api_for(ConfigurationExtension))
        self._extensions[ConfigurationExtension.name] = self._configuration
        self._configuration_registered = False

    @property
    def hub(self) -> EventHub:
        return self._hub

    @property
    def started(self) -> bool:
        return self._hub.running

    @property
    def configuration(self) -> dict[str, Any]:
        """Current effective configuration."""
        return self._configuration.configuration

    def _api_for(self, extension_type: type[Extension]) -> ExtensionApi:
        return ExtensionApi(extension_type.name, self._hub, self._network)

    async def _ensure_configuration(self) -> None:
        if not self._configuration_registered:
            await self._configuration.on_registered()
            self._configuration_registered = True

    # Extensions

    async def register_extensions(self, extensions: list[type[Extension]]) -> None:
        """Register extension classes in order.

        Duplicates are skipped. An extension whose on_registered() raises is
        dropped along with its listeners; the rest of the batch continues.
        One hub shared state listing all extensions is published per batch.
        """
        await self._ensure_configuration()

        registered = []
        for extension_type in extensions:
            name = extension_type.name
            if name in self._extensions:
                logger.warning("Extension %s is already registered, skipping", name)
                continue

            extension = extension_type(self._api_for(extension_type))
            try:
                await extension.on_registered()
            except Exception as e:
                logger.error("Failed to register extension %s: %s", name, e, exc_info=True)
                self._hub.unregister_listeners(name)
                continue

            self._extensions[name] = extension
            registered.append(name)
            logger.info("Extension %s registered", name)

        if registered:
            self._hub.create_shared_state(EventHub.SHARED_STATE_OWNER, self._hub_state())

    def _hub_state(self) -> dict[str, Any]:
        return {
            "extensions": {
                ext.name: {"friendlyName": ext.friendly_name, "version": ext.version}
                for ext in self._extensions.values()
            }
        }

    def extension(self, extension_type: type[E]) -> E | None:
        """Get the registered instance of an extension class."""
        extension = self._extensions.get(extension_type.name)
        return extension if isinstance(extension, extension_type) else None

    def register_event_listener(
        self, type: str, source: str, handler: EventListener, owner: str = ""
    ) -> None:
        """Listen to hub events outside of any extension."""
        self._hub.register_listener(type, source, handler, owner=owner)

    # Events

    def dispatch(self, event: Event) -> None:
        """Dispatch an event through the hub."""
        self._hub.dispatch(event)

    async def dispatch_with_response(
        self, event: Event, timeout: float = 1.0
    ) -> Event | None:
        """Dispatch an event and wait for its response."""
        return await self._hub.dispatch_with_response(event, timeout)

    async def wait_idle(self, timeout: float) -> bool:
        """Wait until the hub has delivered every queued event."""
        return await self._hub.wait_idle(timeout)

    # Configuration

    def _configuration_request(self, data: dict[str, Any]) -> None:
        self._hub.dispatch(
            Event(
                name="Configuration Request Event",
                type=EventType.CONFIGURATION,
                source=EventSource.REQUEST_CONTENT,
                data=data,
            )
        )

    def update_configuration(self, config: dict[str, Any]) -> None:
        """Merge programmatic configuration over the loaded configuration."""
        self._configuration_request({CONFIG_UPDATE: dict(config)})

    def configure_with_app_id(self, app_id: str) -> None:
        """Download the configuration published for an app id."""
        self._configuration_request({CONFIG_APP_ID: app_id})

    def configure_with_file(self, file_path: str | Path) -> None:
        """Load configuration from a local JSON document."""
        self._configuration_request({CONFIG_FILE_PATH: str(file_path)})

    async def get_configuration(self, timeout: float = 1.0) -> dict[str, Any] | None:
        """Ask the configuration extension for the current configuration."""
        response = await self.dispatch_with_response(
            Event(
                name="Configuration Request Event",
                type=EventType.CONFIGURATION,
                source=EventSource.REQUEST_CONTENT,
                data={CONFIG_GET_DATA: True},
            ),
            timeout,
        )
        return response.data if response else None

    def set_privacy_status(self, status: str) -> None:
        """Set global.privacy (optedin, optedout, optunknown)."""
        self.update_configuration({PRIVACY_KEY: status})

    # Logging

    def set_log_level(self, level: LogLevel) -> None:
        """Set the runtime's log level."""
        get_logger(SDK_LOGGER_NAME).setLevel(level.logging_level)

    def log(self, level: LogLevel, tag: str, message: str) -> None:
        """Log a message through the runtime's logger."""
        get_logger(SDK_LOGGER_NAME).log(
            level.logging_level, message, extra={"context": {"tag": tag}}
        )

    # Lifecycle

    def lifecycle_start(self, additional_context_data: dict[str, str] | None = None) -> None:
        """Start a lifecycle session."""
        self._hub.dispatch(
            Event(
                name="Lifecycle Resume",
                type=EventType.GENERIC_LIFECYCLE,
                source=EventSource.REQUEST_CONTENT,
                data={
                    "action": "start",
                    "additionalcontextdata": additional_context_data or {},
                },
            )
        )

    def lifecycle_pause(self) -> None:
        """Pause the lifecycle session."""
        self._hub.dispatch(
            Event(
                name="Lifecycle Pause",
                type=EventType.GENERIC_LIFECYCLE,
                source=EventSource.REQUEST_CONTENT,
                data={"action": "pause"},
            )
        )

    async def start(self, callback: StartCallback | None = None) -> None:
        """Start event delivery, then run the callback."""
        logger.info("Starting MobileCore")
        await self._ensure_configuration()
        await self._hub.start()

        if callback is not None:
            result = callback()
            if inspect.isawaitable(result):
                await result

    async def stop(self) -> None:
        """Stop in reverse order: hub, extensions, network."""
        await self._hub.stop()
        for extension in reversed(list(self._extensions.values())):
            await extension.on_unregistered()
        await self._network.close()
        logger.info("MobileCore stopped")
