"""Configuration extension: owns the merged SDK configuration."""

from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..config import REMOTE_CONFIG_URL_TEMPLATE
from ..logging_config import get_logger
from ..models import Event, EventSource, EventType, HttpMethod, NetworkRequest
from .base import Extension

logger = get_logger(__name__)

CONFIG_UPDATE = "config.update"
CONFIG_APP_ID = "config.appId"
CONFIG_FILE_PATH = "config.filePath"
CONFIG_GET_DATA = "config.getData"

_config_document = TypeAdapter(dict[str, Any])


def parse_config_document(raw: bytes | str) -> dict[str, Any]:
    """Parse a JSON configuration document into a flat key/value map."""
    return _config_document.validate_json(raw)


class ConfigurationExtension(Extension):
    """Merges remote/file configuration with programmatic overrides.

    Overrides from config.update always win over the base configuration
    loaded from an app id or a file.
    """

    name = "com.adobe.module.configuration"
    friendly_name = "Configuration"
    version = "1.0.0"

    def __init__(self, api):
        super().__init__(api)
        self._base: dict[str, Any] = {}
        self._overrides: dict[str, Any] = {}

    @property
    def configuration(self) -> dict[str, Any]:
        """Current effective configuration."""
        return {**self._base, **self._overrides}

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.CONFIGURATION, EventSource.REQUEST_CONTENT, self._handle_request
        )

    async def _handle_request(self, event: Event) -> None:
        data = event.data or {}

        if CONFIG_UPDATE in data:
            self._overrides.update(data[CONFIG_UPDATE])
        elif CONFIG_APP_ID in data:
            loaded = await self._load_remote(data[CONFIG_APP_ID])
            if loaded is None:
                return
            self._base = loaded
        elif CONFIG_FILE_PATH in data:
            loaded = self._load_file(data[CONFIG_FILE_PATH])
            if loaded is None:
                return
            self._base = loaded
        elif CONFIG_GET_DATA in data:
            self._respond(event)
            return
        else:
            logger.warning("Ignoring configuration request without a known key")
            return

        self._api.create_shared_state(self.configuration)
        self._respond(event)

    def _respond(self, request: Event) -> None:
        self._api.dispatch(
            request.create_response(
                name="Configuration Response Event",
                type=EventType.CONFIGURATION,
                source=EventSource.RESPONSE_CONTENT,
                data=self.configuration,
            )
        )

    async def _load_remote(self, app_id: str) -> dict[str, Any] | None:
        if not app_id:
            logger.error("Cannot load remote configuration for an empty app id")
            return None

        url = REMOTE_CONFIG_URL_TEMPLATE.format(app_id=app_id)
        connection = await self._api.network.send(
            NetworkRequest(url=url, method=HttpMethod.GET)
        )
        if not connection.ok:
            logger.error(
                "Remote configuration download failed (status=%s, error=%s)",
                connection.status_code,
                connection.error,
            )
            return None

        try:
            return parse_config_document(connection.data or b"")
        except ValidationError as e:
            logger.error("Remote configuration for %s is not valid JSON: %s", app_id, e)
            return None

    def _load_file(self, file_path: str) -> dict[str, Any] | None:
        path = Path(file_path) if file_path else None
        if path is None or not path.is_file():
            logger.error("Configuration file not found: %s", file_path)
            return None

        try:
            return parse_config_document(path.read_bytes())
        except ValidationError as e:
            logger.error("Configuration file %s is not valid JSON: %s", file_path, e)
            return None
