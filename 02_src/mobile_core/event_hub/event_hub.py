"""EventHub implementation: ordered, asynchronous event delivery."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from ..logging_config import get_logger
from ..models import Event, EventSource, EventType

logger = get_logger(__name__)


EventListener = Callable[[Event], Awaitable[None]]


@dataclass
class _Registration:
    owner: str
    type: str
    source: str
    handler: EventListener

    def matches(self, event: Event) -> bool:
        type_ok = self.type in (EventType.WILDCARD, event.type)
        source_ok = self.source in (EventSource.WILDCARD, event.source)
        return type_ok and source_ok


class IEventHub(Protocol):
    """In-process event hub shared by all extensions."""

    def register_listener(
        self, type: str, source: str, handler: EventListener, owner: str = ""
    ) -> None:
        """Register a handler for (type, source); either may be a wildcard."""
        ...

    def dispatch(self, event: Event) -> None:
        """Queue an event for delivery. Never blocks."""
        ...

    async def dispatch_with_response(
        self, event: Event, timeout: float
    ) -> Event | None:
        """Dispatch an event and wait for the event answering it."""
        ...

    def create_shared_state(self, owner: str, data: dict) -> None:
        """Publish shared state for an owner."""
        ...

    def get_shared_state(self, owner: str) -> dict | None:
        """Get the latest shared state for an owner."""
        ...

    async def wait_idle(self, timeout: float) -> bool:
        """Wait until every queued event has been delivered."""
        ...


class EventHub:
    """Delivers events one at a time, in dispatch order, on a background task.

    All handlers matching an event run concurrently; a failing handler is
    logged and does not affect the others. Events dispatched before start()
    are held until the hub starts.
    """

    SHARED_STATE_OWNER = "com.adobe.module.eventhub"

    def __init__(self):
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._listeners: list[_Registration] = []
        self._shared_states: dict[str, dict] = {}
        self._pending_responses: dict[str, asyncio.Future] = {}
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def register_listener(
        self, type: str, source: str, handler: EventListener, owner: str = ""
    ) -> None:
        """Register a handler for (type, source); either may be a wildcard."""
        self._listeners.append(_Registration(owner, type, source, handler))

    def unregister_listeners(self, owner: str) -> None:
        """Drop every listener registered by an owner."""
        self._listeners = [r for r in self._listeners if r.owner != owner]

    def dispatch(self, event: Event) -> None:
        """Queue an event for delivery. Never blocks."""
        logger.debug("Dispatching %s (%s, %s)", event.name, event.type, event.source)
        self._queue.put_nowait(event)

    async def dispatch_with_response(
        self, event: Event, timeout: float
    ) -> Event | None:
        """Dispatch an event and wait for the event answering it.

        Must not be awaited from inside a listener: the hub delivers one
        event at a time, so the response could never arrive.
        """
        if not self.running:
            raise RuntimeError("EventHub not started")

        future = asyncio.get_running_loop().create_future()
        self._pending_responses[event.id] = future
        self.dispatch(event)
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            logger.warning("No response to %s within %ss", event.name, timeout)
            return None
        finally:
            self._pending_responses.pop(event.id, None)

    def create_shared_state(self, owner: str, data: dict) -> None:
        """Publish shared state and announce it with a hub sharedState event."""
        self._shared_states[owner] = data
        self.dispatch(
            Event(
                name="Shared state change",
                type=EventType.HUB,
                source=EventSource.SHARED_STATE,
                data={"stateowner": owner},
            )
        )

    def get_shared_state(self, owner: str) -> dict | None:
        """Get the latest shared state for an owner."""
        return self._shared_states.get(owner)

    async def start(self) -> None:
        """Start the delivery task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("EventHub started")

    async def stop(self) -> None:
        """Stop the delivery task. Undelivered events are dropped."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("EventHub stopped")

    async def wait_idle(self, timeout: float) -> bool:
        """Wait until every queued event has been delivered.

        Events dispatched by listeners while handling an event are queued
        before that event is marked done, so chains are covered too.
        """
        try:
            await asyncio.wait_for(self._queue.join(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def _deliver(self, event: Event) -> None:
        handlers = [r.handler for r in self._listeners if r.matches(event)]

        if handlers:
            results = await asyncio.gather(
                *[handler(event) for handler in handlers],
                return_exceptions=True,
            )

            # Log any exceptions
            for i, result in enumerate(results):
                if isinstance(result, Exception):
                    logger.error(
                        "Error in listener %s for %s: %s", i, event.name, result
                    )

        if event.response_id:
            future = self._pending_responses.get(event.response_id)
            if future and not future.done():
                future.set_result(event)
