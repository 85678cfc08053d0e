"""Lifecycle extension: launch counting and session tracking."""

import platform
from datetime import datetime, timezone

from ..logging_config import get_logger
from ..models import Event, EventSource, EventType
from .base import Extension

logger = get_logger(__name__)

ACTION_START = "start"
ACTION_PAUSE = "pause"


class Lifecycle(Extension):
    """Counts launches and reports lifecycle context data on session start."""

    name = "com.adobe.module.lifecycle"
    friendly_name = "Lifecycle"
    version = "1.0.0"

    def __init__(self, api):
        super().__init__(api)
        self._install_date: datetime | None = None
        self._launches = 0
        self._session_start: datetime | None = None

    @property
    def launches(self) -> int:
        return self._launches

    @property
    def in_session(self) -> bool:
        return self._session_start is not None

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.GENERIC_LIFECYCLE,
            EventSource.REQUEST_CONTENT,
            self._handle_request,
        )

    async def _handle_request(self, event: Event) -> None:
        data = event.data or {}
        action = data.get("action")

        if action == ACTION_START:
            self._start(event, data.get("additionalcontextdata") or {})
        elif action == ACTION_PAUSE:
            self._pause()
        else:
            logger.warning("Unknown lifecycle action: %s", action)

    def _start(self, event: Event, additional: dict) -> None:
        if self.in_session:
            logger.debug("Lifecycle session already started")
            return

        now = datetime.now(timezone.utc)
        install = self._install_date is None
        if install:
            self._install_date = now
        self._launches += 1
        self._session_start = now

        context_data = {
            "launches": str(self._launches),
            "installdate": self._install_date.strftime("%m/%d/%Y"),
            "osversion": platform.platform(),
            **({"installevent": "InstallEvent"} if install else {"launchevent": "LaunchEvent"}),
            **additional,
        }

        self._api.create_shared_state(
            {
                "lifecyclecontextdata": context_data,
                "starttimestampmillis": int(now.timestamp() * 1000),
            }
        )
        self._api.dispatch(
            event.create_response(
                name="Lifecycle Start",
                type=EventType.LIFECYCLE,
                source=EventSource.RESPONSE_CONTENT,
                data={
                    "lifecyclecontextdata": context_data,
                    "sessionevent": "start",
                },
            )
        )

    def _pause(self) -> None:
        if not self.in_session:
            logger.debug("Lifecycle pause without an active session")
            return
        length = datetime.now(timezone.utc) - self._session_start
        logger.debug("Lifecycle session paused after %.1fs", length.total_seconds())
        self._session_start = None
