"""EventHub module."""

from .event_hub import EventHub, EventListener, IEventHub

__all__ = ["EventHub", "EventListener", "IEventHub"]
