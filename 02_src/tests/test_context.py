"""Tests for FunctionalTestContext."""

import asyncio

import pytest

from functest import CannedResponse, ExpectationFailure, FunctionalTestContext, UnmatchedPolicy
from mobile_core import Edge
from mobile_core.models import Event, ExperienceEvent, HttpMethod, NetworkRequest

URL = "https://edge.adobedc.net/ee/v1/interact"


def make_event(type: str = "eventType", source: str = "eventSource", name: str = "e1", data=None):
    return Event(name=name, type=type, source=source, data=data)


class TestAssertExpectedEvents:
    """Tests for assert_expected_events()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [1, 3])
    async def test_exact_count_passes(self, functional_context, count):
        """Test that n expected and n dispatched passes."""
        functional_context.set_expectation_event("eventType", "eventSource", count)
        for _ in range(count):
            functional_context.core.dispatch(make_event())

        await functional_context.assert_expected_events(ignore_unexpected_events=False)

    @pytest.mark.asyncio
    async def test_one_extra_event_fails(self, functional_context):
        """Test that n+1 dispatched against n expected fails."""
        functional_context.set_expectation_event("eventType", "eventSource", 2)
        for _ in range(3):
            functional_context.core.dispatch(make_event())

        with pytest.raises(ExpectationFailure) as exc_info:
            await functional_context.assert_expected_events(ignore_unexpected_events=False)

        assert "Expected 2 events with type eventType and source eventSource, but received 3" in str(
            exc_info.value
        )

    @pytest.mark.asyncio
    async def test_missing_event_times_out(self, functional_context):
        """Test that too few events fail with a timeout report."""
        functional_context.set_expectation_event("eventType", "eventSource", 2)
        functional_context.core.dispatch(make_event())

        with pytest.raises(ExpectationFailure) as exc_info:
            await functional_context.assert_expected_events(timeout=0.1)

        failure = exc_info.value
        assert len(failure.mismatches) == 1
        assert failure.mismatches[0].startswith("Timed out waiting for event")
        assert "expected 2, but received 1" in failure.mismatches[0]

    @pytest.mark.asyncio
    async def test_unexpected_event_fails_when_not_ignored(self, functional_context):
        """Test that an unregistered pair fails unless ignored."""
        functional_context.set_expectation_event("eventType", "eventSource", 1)
        functional_context.core.dispatch(make_event())
        functional_context.core.dispatch(make_event(type="unexpectedType"))

        with pytest.raises(ExpectationFailure, match="unexpected events"):
            await functional_context.assert_expected_events(ignore_unexpected_events=False)

        await functional_context.assert_expected_events(ignore_unexpected_events=True)

    @pytest.mark.asyncio
    async def test_no_expectations_fails(self, functional_context):
        """Test that asserting without expectations is a failure."""
        with pytest.raises(ExpectationFailure, match="no event expectations set"):
            await functional_context.assert_expected_events()

    def test_zero_count_rejected(self):
        """Test that count must be > 0."""
        ctx = FunctionalTestContext()
        with pytest.raises(ValueError):
            ctx.set_expectation_event("eventType", "eventSource", 0)

    @pytest.mark.asyncio
    async def test_every_mismatch_in_one_report(self, functional_context):
        """Test that several problems surface in a single failure."""
        functional_context.set_expectation_event("a", "s", 1)
        functional_context.set_expectation_event("b", "s", 1)
        functional_context.core.dispatch(make_event(type="a", source="s"))
        functional_context.core.dispatch(make_event(type="a", source="s"))
        functional_context.core.dispatch(make_event(type="c", source="s"))

        with pytest.raises(ExpectationFailure) as exc_info:
            await functional_context.assert_expected_events(timeout=0.1)

        assert len(exc_info.value.mismatches) == 3

    @pytest.mark.asyncio
    async def test_missing_events_share_one_timeout(self, functional_context):
        """Test that several missing pairs are waited on together, not one after another."""
        for event_type in ("a", "b", "c"):
            functional_context.set_expectation_event(event_type, "s", 1)

        loop = asyncio.get_running_loop()
        started = loop.time()
        with pytest.raises(ExpectationFailure) as exc_info:
            await functional_context.assert_expected_events(timeout=0.2)
        elapsed = loop.time() - started

        assert len(exc_info.value.mismatches) == 3
        assert elapsed < 0.5


class TestAssertUnexpectedEvents:
    """Tests for assert_unexpected_events()."""

    @pytest.mark.asyncio
    async def test_only_registered_events_pass(self, functional_context):
        """Test that registered events only pass."""
        functional_context.set_expectation_event("eventType", "eventSource", 2)
        functional_context.core.dispatch(make_event())
        functional_context.core.dispatch(make_event())

        await functional_context.assert_unexpected_events()

    @pytest.mark.asyncio
    async def test_one_unregistered_event_fails(self, functional_context):
        """Test that a single unregistered event fails."""
        functional_context.set_expectation_event("eventType", "eventSource", 1)
        functional_context.core.dispatch(make_event())
        functional_context.core.dispatch(make_event(type="unexpectedType"))

        with pytest.raises(ExpectationFailure) as exc_info:
            await functional_context.assert_unexpected_events()

        assert exc_info.value.mismatches == [
            "Received 1 unexpected events with type unexpectedType and source eventSource"
        ]

    @pytest.mark.asyncio
    async def test_nothing_dispatched_passes(self, functional_context):
        """Test that no events and no expectations passes."""
        await functional_context.assert_unexpected_events()


class TestGetDispatchedEvents:
    """Tests for get_dispatched_events_with()."""

    @pytest.mark.asyncio
    async def test_dispatch_order_and_count(self, functional_context):
        """Test that matching events come back in dispatch order."""
        for i in range(5):
            functional_context.core.dispatch(make_event(name=f"e{i}"))
            functional_context.core.dispatch(make_event(type="other", name=f"o{i}"))

        events = await functional_context.get_dispatched_events_with("eventType", "eventSource")

        assert [e.name for e in events] == [f"e{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_waits_for_expectation(self, functional_context):
        """Test that an expectation on the pair is waited for."""
        functional_context.set_expectation_event("eventType", "eventSource", 1)
        functional_context.core.dispatch(make_event(data={"test": "withdata"}))

        events = await functional_context.get_dispatched_events_with("eventType", "eventSource")

        assert len(events) == 1
        assert events[0].data == {"test": "withdata"}

    @pytest.mark.asyncio
    async def test_returns_every_event_beyond_expectation(self, functional_context):
        """Test that events past the expected count are still returned."""
        functional_context.set_expectation_event("eventType", "eventSource", 1)
        for i in range(3):
            functional_context.core.dispatch(make_event(name=f"e{i}"))

        events = await functional_context.get_dispatched_events_with("eventType", "eventSource")

        assert [e.name for e in events] == ["e0", "e1", "e2"]

    @pytest.mark.asyncio
    async def test_no_events(self, functional_context):
        """Test an empty result."""
        assert await functional_context.get_dispatched_events_with("none", "none") == []


class TestNetworkAssertions:
    """Tests for the network request assertions."""

    async def _send(self, ctx, count: int):
        for i in range(count):
            await ctx.core._network.send(
                NetworkRequest(url=f"{URL}?requestId={i}", method=HttpMethod.POST, body=b"{}")
            )

    @pytest.mark.asyncio
    async def test_count_matches(self, functional_context):
        """Test that the exact number of requests passes."""
        functional_context.set_expectation_network_request(URL, HttpMethod.POST, 2)
        await self._send(functional_context, 2)

        await functional_context.assert_network_requests_count()

    @pytest.mark.asyncio
    async def test_count_too_high(self, functional_context):
        """Test that an extra request fails."""
        functional_context.set_expectation_network_request(URL, HttpMethod.POST, 1)
        await self._send(functional_context, 2)

        with pytest.raises(ExpectationFailure, match="but received 2"):
            await functional_context.assert_network_requests_count()

    @pytest.mark.asyncio
    async def test_count_too_low(self, functional_context):
        """Test that a missing request times out."""
        functional_context.set_expectation_network_request(URL, HttpMethod.POST, 2)
        await self._send(functional_context, 1)

        with pytest.raises(ExpectationFailure, match="Timed out waiting for network requests"):
            await functional_context.assert_network_requests_count(timeout=0.1)

    @pytest.mark.asyncio
    async def test_no_expectations_fails(self, functional_context):
        """Test that asserting without expectations is a failure."""
        with pytest.raises(ExpectationFailure, match="no network request expectations"):
            await functional_context.assert_network_requests_count()

    @pytest.mark.asyncio
    async def test_requests_and_flattened_body(self, functional_context):
        """Test reading back captured requests and their bodies."""
        functional_context.set_network_response_for(
            URL, HttpMethod.POST, CannedResponse(status_code=200)
        )
        await functional_context.core._network.send(
            NetworkRequest(
                url=URL,
                method=HttpMethod.POST,
                body=b'{"events": [{"xdm": {"eventType": "testType"}}]}',
            )
        )

        requests = await functional_context.get_network_requests_with(URL, HttpMethod.POST)

        assert len(requests) == 1
        flat = functional_context.get_flatten_network_request_body(requests[0])
        assert flat == {"events[0].xdm.eventType": "testType"}

    @pytest.mark.asyncio
    async def test_returns_every_request_beyond_expectation(self, functional_context):
        """Test that requests past the expected count are still returned."""
        await functional_context.core.register_extensions([Edge])
        functional_context.core.update_configuration({"edge.configId": "12345-example"})
        functional_context.set_expectation_network_request(URL, HttpMethod.POST, 1)

        edge = functional_context.core.extension(Edge)
        for i in range(3):
            edge.send_event(ExperienceEvent(xdm={"index": i}))

        requests = await functional_context.get_network_requests_with(URL, HttpMethod.POST)

        assert len(requests) == 3


class TestContextLifecycle:
    """Tests for context setup and reset."""

    @pytest.mark.asyncio
    async def test_reset_test_expectations(self, functional_context):
        """Test that reset clears events and network state."""
        functional_context.set_expectation_event("eventType", "eventSource", 1)
        functional_context.set_expectation_network_request(URL, HttpMethod.POST, 1)
        functional_context.core.dispatch(make_event())
        await functional_context.assert_expected_events()

        functional_context.reset_test_expectations()

        assert await functional_context.get_dispatched_events_with("eventType", "eventSource") == []
        with pytest.raises(ExpectationFailure):
            await functional_context.assert_network_requests_count()

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        """Test using the context with `async with`."""
        async with FunctionalTestContext(UnmatchedPolicy.REJECT) as ctx:
            assert ctx.core.started
            connection = await ctx.core._network.send(NetworkRequest(url=URL))
            assert connection.error is not None
        assert not ctx.core.started

    def test_debug_enabled_propagates(self):
        """Test that debug_enabled reaches the recorders."""
        ctx = FunctionalTestContext(debug_enabled=True)

        assert ctx._events.debug_enabled is True
        assert ctx.network.debug_enabled is True
