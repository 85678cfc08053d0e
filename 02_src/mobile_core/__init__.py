"""In-process mobile runtime exercised by the functional tests and the demo app."""

from .core import IMobileCore, MobileCore
from .event_hub import EventHub, IEventHub
from .extensions import (
    Assurance,
    ConfigurationExtension,
    Edge,
    Extension,
    Identity,
    Lifecycle,
    Signal,
)
from .logging_config import LogLevel
from .models import (
    Event,
    EventSource,
    EventType,
    ExperienceEvent,
    HttpConnection,
    HttpMethod,
    NetworkRequest,
)
from .network import INetworkService, NetworkService

__all__ = [
    # Facade
    "MobileCore",
    "IMobileCore",
    "LogLevel",
    # Models
    "Event",
    "EventType",
    "EventSource",
    "ExperienceEvent",
    "HttpMethod",
    "NetworkRequest",
    "HttpConnection",
    # Components
    "IEventHub",
    "EventHub",
    "INetworkService",
    "NetworkService",
    # Extensions
    "Extension",
    "ConfigurationExtension",
    "Identity",
    "Lifecycle",
    "Signal",
    "Assurance",
    "Edge",
]
