"""Signal extension: executes postback consequences from the rules engine."""

from urllib.parse import urlparse

from ..logging_config import get_logger
from ..models import Event, EventSource, EventType, HttpMethod, NetworkRequest
from .base import Extension
from .configuration import ConfigurationExtension
from .identity import PRIVACY_KEY, PRIVACY_OPTED_OUT

logger = get_logger(__name__)

POSTBACK = "pb"
PII = "pii"
OPEN_URL = "url"


class Signal(Extension):
    """Sends pb/pii postbacks; open-url consequences are only logged."""

    name = "com.adobe.module.signal"
    friendly_name = "Signal"
    version = "1.0.0"

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.RULES_ENGINE,
            EventSource.RESPONSE_CONTENT,
            self._handle_consequence,
        )

    async def _handle_consequence(self, event: Event) -> None:
        consequence = (event.data or {}).get("triggeredconsequence") or {}
        kind = consequence.get("type")
        detail = consequence.get("detail") or {}

        if kind not in (POSTBACK, PII, OPEN_URL):
            return

        config = self._api.get_shared_state(ConfigurationExtension.name) or {}
        if config.get(PRIVACY_KEY) == PRIVACY_OPTED_OUT:
            logger.debug("Privacy is opted out, dropping %s consequence", kind)
            return

        url = detail.get("templateurl")
        if not url:
            logger.warning("Consequence %s has no templateurl", consequence.get("id"))
            return

        if kind == OPEN_URL:
            logger.debug("Open URL consequence for %s", url)
            return

        if kind == PII and urlparse(url).scheme != "https":
            logger.warning("Refusing to send PII over a non-https url: %s", url)
            return

        body = detail.get("templatebody")
        headers = {}
        if body:
            headers["Content-Type"] = detail.get("contenttype") or "text/plain"

        request = NetworkRequest(
            url=url,
            method=HttpMethod.POST if body else HttpMethod.GET,
            body=body.encode("utf-8") if body else None,
            headers=headers,
        )
        if detail.get("timeout"):
            request.read_timeout = float(detail["timeout"])

        connection = await self._api.network.send(request)
        if not connection.ok:
            logger.warning(
                "Postback to %s failed (status=%s, error=%s)",
                url,
                connection.status_code,
                connection.error,
            )
