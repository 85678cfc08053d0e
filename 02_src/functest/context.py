"""FunctionalTestContext: per-test expectations over a live MobileCore."""

import asyncio
from typing import Any, TypeVar

import httpx

from mobile_core import MobileCore
from mobile_core.logging_config import get_logger
from mobile_core.models import Event, EventSource, EventType, HttpMethod

from .constants import Defaults
from .errors import ExpectationFailure
from .expectations import EventExpectations
from .flatten import flatten_request_body
from .latch import CountDownLatch
from .network import CannedResponse, NetworkMock, UnmatchedPolicy

logger = get_logger(__name__)

RECORDER_OWNER = "functest.recorder"

K = TypeVar("K")


class FunctionalTestContext:
    """Everything one functional test case owns.

    Creates a MobileCore whose network goes through a NetworkMock and whose
    every event is recorded. Use as an async context manager, or call
    start()/stop().
    """

    def __init__(
        self,
        unmatched_policy: UnmatchedPolicy = UnmatchedPolicy.DEFAULT_RESPONSE,
        debug_enabled: bool = False,
    ):
        self._events = EventExpectations()
        self._network = NetworkMock(unmatched_policy)
        self.core = MobileCore(transport=self._network.transport)
        self.core.register_event_listener(
            EventType.WILDCARD, EventSource.WILDCARD, self._record, owner=RECORDER_OWNER
        )
        self.debug_enabled = debug_enabled

    @property
    def debug_enabled(self) -> bool:
        return self._debug_enabled

    @debug_enabled.setter
    def debug_enabled(self, value: bool) -> None:
        self._debug_enabled = value
        self._events.debug_enabled = value
        self._network.debug_enabled = value

    @property
    def network(self) -> NetworkMock:
        return self._network

    async def start(self) -> None:
        await self.core.start()

    async def stop(self) -> None:
        await self.core.stop()

    async def __aenter__(self) -> "FunctionalTestContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _record(self, event: Event) -> None:
        self._events.record(event)

    async def _settle(self, timeout: float) -> bool:
        return await self.core.wait_idle(timeout)

    async def _wait_latches(self, latches: dict[K, CountDownLatch], timeout: float) -> set[K]:
        """Wait on every latch within one shared timeout. Returns the keys still open."""
        opened = await asyncio.gather(*(latch.wait(timeout) for latch in latches.values()))
        return {key for key, ok in zip(latches, opened) if not ok}

    # Event expectations

    def set_expectation_event(self, type: str, source: str, count: int) -> None:
        """Expect exactly `count` events of (type, source). count must be > 0."""
        self._events.set_expectation(type, source, count)

    async def assert_expected_events(
        self,
        ignore_unexpected_events: bool = False,
        timeout: float = Defaults.WAIT_EVENT_TIMEOUT,
    ) -> None:
        """Wait for every expected event and check the counts match exactly.

        Unless ignore_unexpected_events is set, also fails on events that
        were never expected.
        """
        expected = self._events.expected
        if not expected:
            raise ExpectationFailure(
                "There are no event expectations set, use this API after "
                "calling set_expectation_event"
            )

        timed_out = await self._wait_latches(expected, timeout)
        mismatches = []
        for spec, latch in expected.items():
            if spec in timed_out:
                mismatches.append(
                    f"Timed out waiting for event {spec}, expected "
                    f"{latch.initial_count}, but received "
                    f"{self._events.received_count(spec)}"
                )

        if not await self._settle(timeout):
            mismatches.append("Event hub did not settle within the timeout")

        mismatches.extend(self._events.count_mismatches(skip=timed_out))
        if not ignore_unexpected_events:
            mismatches.extend(self._unexpected_mismatches())

        if mismatches:
            raise ExpectationFailure("Expected events were not received", mismatches)

    async def assert_unexpected_events(
        self, timeout: float = Defaults.WAIT_TIMEOUT
    ) -> None:
        """Fail if any received event had no expectation or a count mismatch."""
        mismatches = []
        if not await self._settle(timeout):
            mismatches.append("Event hub did not settle within the timeout")

        mismatches.extend(self._events.count_mismatches())
        mismatches.extend(self._unexpected_mismatches())

        if mismatches:
            raise ExpectationFailure("Received unexpected events", mismatches)

    def _unexpected_mismatches(self) -> list[str]:
        return [
            f"Received {count} unexpected events with {spec}"
            for spec, count in self._events.unexpected().items()
        ]

    async def get_dispatched_events_with(
        self,
        type: str,
        source: str,
        timeout: float = Defaults.WAIT_EVENT_TIMEOUT,
    ) -> list[Event]:
        """Events received for (type, source), in dispatch order.

        Waits for the expectation on the pair when there is one, then for
        the hub to drain.
        """
        latch = self._events.latch_for(type, source)
        if latch:
            if not await latch.wait(timeout):
                logger.warning(
                    "Timed out waiting for events of type %s and source %s", type, source
                )
        await self._settle(timeout)
        return self._events.received(type, source)

    # Network expectations

    def set_expectation_network_request(
        self, url: str, method: HttpMethod, count: int
    ) -> None:
        """Expect exactly `count` calls to (url, method). count must be > 0."""
        self._network.set_expectation(url, method, count)

    def set_network_response_for(
        self, url: str, method: HttpMethod, response: CannedResponse
    ) -> None:
        """Queue a canned response for (url, method)."""
        self._network.set_response_for(url, method, response)

    async def get_network_requests_with(
        self,
        url: str,
        method: HttpMethod,
        timeout: float = Defaults.WAIT_NETWORK_REQUEST_TIMEOUT,
    ) -> list[httpx.Request]:
        """Captured requests for (url, method), in the order they were sent.

        Waits for the expectation on the endpoint when there is one, then for
        the hub to drain.
        """
        latch = self._network.latch_for(url, method)
        if latch:
            if not await latch.wait(timeout):
                logger.warning("Timed out waiting for network requests to %s", url)
        await self._settle(timeout)
        return self._network.requests_with(url, method)

    def get_flatten_network_request_body(self, request: httpx.Request) -> dict[str, Any]:
        """The request's JSON body as dotted-path keys."""
        return flatten_request_body(request)

    async def assert_network_requests_count(
        self, timeout: float = Defaults.WAIT_NETWORK_REQUEST_TIMEOUT
    ) -> None:
        """Wait for every expected endpoint and check the counts match exactly."""
        expected = self._network.expected
        if not expected:
            raise ExpectationFailure(
                "There are no network request expectations set, use this API "
                "after calling set_expectation_network_request"
            )

        timed_out = await self._wait_latches(expected, timeout)
        mismatches = []
        for spec, latch in expected.items():
            if spec in timed_out:
                mismatches.append(
                    f"Timed out waiting for network requests {spec}, expected "
                    f"{latch.initial_count}, but received "
                    f"{self._network.captured_count(spec)}"
                )

        if not await self._settle(timeout):
            mismatches.append("Event hub did not settle within the timeout")

        mismatches.extend(self._network.count_mismatches(skip=timed_out))
        if mismatches:
            raise ExpectationFailure("Network request counts do not match", mismatches)

    def reset_test_expectations(self) -> None:
        """Clear all event and network expectations and everything recorded."""
        logger.debug("Resetting functional test expectations")
        self._events.reset()
        self._network.reset()

