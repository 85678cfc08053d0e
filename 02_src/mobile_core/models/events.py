"""Event data models and well-known event types/sources."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


class EventType:
    """Event types understood by the runtime."""

    HUB = "com.adobe.eventType.hub"
    CONFIGURATION = "com.adobe.eventType.configuration"
    IDENTITY = "com.adobe.eventType.identity"
    LIFECYCLE = "com.adobe.eventType.lifecycle"
    GENERIC_LIFECYCLE = "com.adobe.eventType.generic.lifecycle"
    RULES_ENGINE = "com.adobe.eventType.rulesEngine"
    ASSURANCE = "com.adobe.eventType.assurance"
    EDGE = "com.adobe.eventType.edge"
    WILDCARD = "com.adobe.eventType._wildcard_"


class EventSource:
    """Event sources understood by the runtime."""

    SHARED_STATE = "com.adobe.eventSource.sharedState"
    REQUEST_CONTENT = "com.adobe.eventSource.requestContent"
    RESPONSE_CONTENT = "com.adobe.eventSource.responseContent"
    ERROR_RESPONSE_CONTENT = "com.adobe.eventSource.errorResponseContent"
    REQUEST_IDENTITY = "com.adobe.eventSource.requestIdentity"
    RESPONSE_IDENTITY = "com.adobe.eventSource.responseIdentity"
    WILDCARD = "com.adobe.eventSource._wildcard_"


@dataclass
class Event:
    """An occurrence dispatched through the EventHub.

    Equality is structural (name, type, source, data); id, timestamp and
    response_id are bookkeeping only.
    """

    name: str
    type: str
    source: str
    data: dict | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )
    response_id: str | None = field(default=None, compare=False)

    def create_response(
        self, name: str, type: str, source: str, data: dict | None = None
    ) -> "Event":
        """Create an event answering this one."""
        return Event(name=name, type=type, source=source, data=data, response_id=self.id)
