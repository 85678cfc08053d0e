"""Runtime data models."""

from .edge import EdgeHandle, EdgeRequest, EdgeResponse, ExperienceEvent
from .events import Event, EventSource, EventType
from .network import HttpConnection, HttpMethod, NetworkRequest

__all__ = [
    # Events
    "Event",
    "EventType",
    "EventSource",
    # Network
    "HttpMethod",
    "NetworkRequest",
    "HttpConnection",
    # Edge
    "ExperienceEvent",
    "EdgeRequest",
    "EdgeHandle",
    "EdgeResponse",
]
