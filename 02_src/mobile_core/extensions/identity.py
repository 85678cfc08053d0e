"""Identity extension: owns the Experience Cloud ID (ECID)."""

import random

from ..logging_config import get_logger
from ..models import Event, EventSource, EventType
from .base import Extension
from .configuration import ConfigurationExtension

logger = get_logger(__name__)

ORG_ID_KEY = "experienceCloud.org"
PRIVACY_KEY = "global.privacy"
PRIVACY_OPTED_OUT = "optedout"


def generate_ecid() -> str:
    """Generate a 38 digit ECID from two random 63-bit halves."""
    return f"{random.getrandbits(63):019d}{random.getrandbits(63):019d}"


class Identity(Extension):
    """Generates the ECID on the first sync for a configured org."""

    name = "com.adobe.module.identity"
    friendly_name = "Identity"
    version = "1.0.0"

    def __init__(self, api):
        super().__init__(api)
        self._ecid: str | None = None
        self._synced_org: str | None = None

    @property
    def ecid(self) -> str | None:
        return self._ecid

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.CONFIGURATION,
            EventSource.RESPONSE_CONTENT,
            self._handle_configuration,
        )
        self._api.register_listener(
            EventType.IDENTITY, EventSource.REQUEST_IDENTITY, self._handle_request
        )

    async def get_experience_cloud_id(self, timeout: float = 1.0) -> str | None:
        """Query the ECID through the hub. Returns None on timeout."""
        response = await self._api.dispatch_with_response(
            Event(
                name="Identity Request Identity",
                type=EventType.IDENTITY,
                source=EventSource.REQUEST_IDENTITY,
            ),
            timeout,
        )
        if response is None:
            return None
        return (response.data or {}).get("mid")

    async def _handle_configuration(self, event: Event) -> None:
        config = event.data or {}
        org_id = config.get(ORG_ID_KEY)
        if not org_id or org_id == self._synced_org:
            return
        if config.get(PRIVACY_KEY) == PRIVACY_OPTED_OUT:
            logger.debug("Privacy is opted out, skipping identity sync")
            return

        self._synced_org = org_id
        self._api.dispatch(
            Event(
                name="Identity Force Sync",
                type=EventType.IDENTITY,
                source=EventSource.REQUEST_IDENTITY,
                data={"forcesync": True},
            )
        )

    async def _handle_request(self, event: Event) -> None:
        config = self._api.get_shared_state(ConfigurationExtension.name) or {}
        opted_out = config.get(PRIVACY_KEY) == PRIVACY_OPTED_OUT

        if opted_out:
            self._ecid = None
        elif self._ecid is None:
            self._ecid = generate_ecid()
            logger.debug("Generated ECID %s", self._ecid)
            self._api.create_shared_state({"mid": self._ecid})

        self._api.dispatch(
            event.create_response(
                name="Identity Response Identity",
                type=EventType.IDENTITY,
                source=EventSource.RESPONSE_IDENTITY,
                data={"mid": self._ecid} if self._ecid else {},
            )
        )
