"""Extension base class and the API handed to each extension."""

from ..event_hub import EventHub, EventListener
from ..models import Event
from ..network import INetworkService


class ExtensionApi:
    """The slice of the runtime an extension may use."""

    def __init__(self, owner: str, hub: EventHub, network: INetworkService):
        self._owner = owner
        self._hub = hub
        self._network = network

    @property
    def network(self) -> INetworkService:
        return self._network

    def register_listener(self, type: str, source: str, handler: EventListener) -> None:
        self._hub.register_listener(type, source, handler, owner=self._owner)

    def dispatch(self, event: Event) -> None:
        self._hub.dispatch(event)

    async def dispatch_with_response(self, event: Event, timeout: float) -> Event | None:
        return await self._hub.dispatch_with_response(event, timeout)

    def create_shared_state(self, data: dict) -> None:
        """Publish this extension's shared state."""
        self._hub.create_shared_state(self._owner, data)

    def get_shared_state(self, owner: str) -> dict | None:
        return self._hub.get_shared_state(owner)


class Extension:
    """Base class for runtime extensions.

    Subclasses set `name` (also their shared state owner), `friendly_name`
    and `version`, and register their listeners in on_registered().
    """

    name = ""
    friendly_name = ""
    version = "0.0.0"

    def __init__(self, api: ExtensionApi):
        self._api = api

    async def on_registered(self) -> None:
        """Called once when the extension is registered."""

    async def on_unregistered(self) -> None:
        """Called when the runtime stops."""
