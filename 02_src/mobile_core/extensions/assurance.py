"""Assurance extension: remote debugging sessions."""

from collections import deque
from urllib.parse import parse_qs, urlparse

from ..logging_config import get_logger
from ..models import Event, EventSource, EventType
from .base import Extension

logger = get_logger(__name__)

SESSION_ID_PARAM = "adb_validation_sessionid"
MAX_BUFFERED_EVENTS = 200


class Assurance(Extension):
    """Buffers a summary of every hub event while a session is active.

    Forwarding the buffer to a remote socket is not implemented.
    """

    name = "com.adobe.assurance"
    friendly_name = "Assurance"
    version = "1.0.0"

    def __init__(self, api):
        super().__init__(api)
        self._session_id: str | None = None
        self._events: deque[dict] = deque(maxlen=MAX_BUFFERED_EVENTS)

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def buffered_events(self) -> list[dict]:
        return list(self._events)

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.ASSURANCE, EventSource.REQUEST_CONTENT, self._handle_request
        )
        self._api.register_listener(
            EventType.WILDCARD, EventSource.WILDCARD, self._record
        )

    def start_session(self, url: str) -> None:
        """Start a session from a deep link carrying the session id."""
        self._api.dispatch(
            Event(
                name="Assurance Start Session",
                type=EventType.ASSURANCE,
                source=EventSource.REQUEST_CONTENT,
                data={"startSessionURL": url},
            )
        )

    def end_session(self) -> None:
        self._session_id = None
        self._events.clear()

    async def on_unregistered(self) -> None:
        self.end_session()

    async def _handle_request(self, event: Event) -> None:
        url = (event.data or {}).get("startSessionURL", "")
        values = parse_qs(urlparse(url).query).get(SESSION_ID_PARAM)
        if not values:
            logger.error("Assurance deep link has no %s: %s", SESSION_ID_PARAM, url)
            return
        self._session_id = values[0]
        logger.info("Assurance session %s started", self._session_id)

    async def _record(self, event: Event) -> None:
        if not self._session_id:
            return
        self._events.append(
            {
                "name": event.name,
                "type": event.type,
                "source": event.source,
                "id": event.id,
                "timestamp": event.timestamp.isoformat(),
            }
        )
