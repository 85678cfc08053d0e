"""Event expectations and the log of received events."""

from dataclasses import dataclass

from mobile_core.logging_config import get_logger
from mobile_core.models import Event

from .latch import CountDownLatch

logger = get_logger(__name__)


@dataclass(frozen=True)
class EventSpec:
    """Key for expectations and received events."""

    type: str
    source: str

    def __str__(self) -> str:
        return f"type {self.type} and source {self.source}"


class EventExpectations:
    """Expected counts per (type, source) and every event received.

    Received events are kept per spec in arrival order. Only register_*,
    record and reset mutate state.
    """

    def __init__(self):
        self._expected: dict[EventSpec, CountDownLatch] = {}
        self._received: dict[EventSpec, list[Event]] = {}
        self.debug_enabled = False

    def set_expectation(self, type: str, source: str, count: int) -> None:
        """Expect exactly `count` events of (type, source). count must be > 0."""
        if count <= 0:
            raise ValueError(
                f"Expected event count should be greater than 0, got {count}"
            )
        self._expected[EventSpec(type, source)] = CountDownLatch(count)

    def record(self, event: Event) -> None:
        """Record a received event and count down its expectation, if any."""
        spec = EventSpec(event.type, event.source)
        self._received.setdefault(spec, []).append(event)

        latch = self._expected.get(spec)
        if latch:
            latch.count_down()

        if self.debug_enabled:
            logger.debug("Received event %s with %s", event.name, spec)

    @property
    def expected(self) -> dict[EventSpec, CountDownLatch]:
        return dict(self._expected)

    def latch_for(self, type: str, source: str) -> CountDownLatch | None:
        return self._expected.get(EventSpec(type, source))

    def received(self, type: str, source: str) -> list[Event]:
        """Events received for (type, source), in arrival order."""
        return list(self._received.get(EventSpec(type, source), []))

    def received_count(self, spec: EventSpec) -> int:
        return len(self._received.get(spec, []))

    def unexpected(self) -> dict[EventSpec, int]:
        """Received (type, source) pairs with no expectation and their counts."""
        return {
            spec: len(events)
            for spec, events in self._received.items()
            if spec not in self._expected
        }

    def count_mismatches(self, skip: set[EventSpec] = frozenset()) -> list[str]:
        """Describe every expected pair whose received count differs."""
        mismatches = []
        for spec, latch in self._expected.items():
            if spec in skip:
                continue
            received = self.received_count(spec)
            if received != latch.initial_count:
                mismatches.append(
                    f"Expected {latch.initial_count} events with {spec}, "
                    f"but received {received}"
                )
        return mismatches

    def reset(self) -> None:
        self._expected.clear()
        self._received.clear()
