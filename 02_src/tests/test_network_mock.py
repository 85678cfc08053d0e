"""Tests for NetworkMock."""

import asyncio

import httpx
import pytest
import pytest_asyncio

from functest.network import (
    CannedResponse,
    NetworkMock,
    NetworkRequestSpec,
    UnmatchedPolicy,
)
from mobile_core.models import HttpMethod

URL = "https://edge.adobedc.net/ee/v1/interact"


@pytest_asyncio.fixture
async def client(network_mock):
    async with httpx.AsyncClient(transport=network_mock.transport) as c:
        yield c


class TestNetworkRequestSpec:
    """Tests for endpoint matching keys."""

    def test_query_is_ignored(self):
        """Test that query strings do not change the key."""
        assert NetworkRequestSpec.of(URL, HttpMethod.POST) == NetworkRequestSpec.of(
            f"{URL}?configId=abc&requestId=1", "post"
        )

    def test_method_matters(self):
        """Test that GET and POST are different endpoints."""
        assert NetworkRequestSpec.of(URL, HttpMethod.POST) != NetworkRequestSpec.of(
            URL, HttpMethod.GET
        )

    def test_trailing_slash_and_host_case(self):
        """Test normalization of trailing slash and host case."""
        assert NetworkRequestSpec.of("https://Example.com/a/", "GET") == NetworkRequestSpec.of(
            "https://example.com/a", "GET"
        )


class TestCannedResponses:
    """Tests for canned response selection."""

    @pytest.mark.asyncio
    async def test_same_canned_response_for_every_call(self, network_mock, client):
        """Test that k calls get k captures, all with the same canned response."""
        canned = CannedResponse(status_code=201, body=b'{"test": "json"}')
        network_mock.set_response_for(URL, HttpMethod.POST, canned)

        for _ in range(3):
            response = await client.post(f"{URL}?configId=1", content=b"{}")
            assert response.status_code == 201
            assert response.json() == {"test": "json"}

        captured = network_mock.captured(URL, HttpMethod.POST)
        assert len(captured) == 3
        assert all(c.response is canned for c in captured)

    @pytest.mark.asyncio
    async def test_limited_slots_then_next_response(self, network_mock, client):
        """Test that responses queue in FIFO order by their slot counts."""
        network_mock.set_response_for(URL, HttpMethod.POST, CannedResponse(status_code=500, times=2))
        network_mock.set_response_for(URL, HttpMethod.POST, CannedResponse(status_code=200))

        statuses = [(await client.post(URL)).status_code for _ in range(4)]

        assert statuses == [500, 500, 200, 200]

    @pytest.mark.asyncio
    async def test_exhausted_slots_fall_back_to_policy(self, network_mock, client):
        """Test that calls after the last limited slot get the default response."""
        network_mock.set_response_for(URL, HttpMethod.POST, CannedResponse(status_code=202, times=1))

        first = await client.post(URL)
        second = await client.post(URL)

        assert first.status_code == 202
        assert second.status_code == 200
        assert second.content == b""
        assert network_mock.captured(URL, HttpMethod.POST)[1].response is None

    @pytest.mark.asyncio
    async def test_concurrent_calls_get_distinct_slots(self, network_mock, client):
        """Test that concurrent calls never share a limited slot."""
        for status in (201, 202, 203):
            network_mock.set_response_for(
                URL, HttpMethod.POST, CannedResponse(status_code=status, times=1)
            )

        responses = await asyncio.gather(*[client.post(URL) for _ in range(3)])

        assert sorted(r.status_code for r in responses) == [201, 202, 203]

    @pytest.mark.asyncio
    async def test_canned_error_is_raised(self, network_mock, client):
        """Test that a canned error fails the call."""
        network_mock.set_response_for(
            URL, HttpMethod.POST, CannedResponse(error=httpx.ConnectTimeout("timed out"))
        )

        with pytest.raises(httpx.ConnectTimeout):
            await client.post(URL)
        assert len(network_mock.requests_with(URL, HttpMethod.POST)) == 1

    def test_invalid_times(self, network_mock):
        """Test that times must be positive."""
        with pytest.raises(ValueError):
            network_mock.set_response_for(URL, HttpMethod.POST, CannedResponse(times=0))


class TestUnmatchedPolicy:
    """Tests for calls without a canned response."""

    @pytest.mark.asyncio
    async def test_default_response(self, network_mock, client):
        """Test that unmatched calls get an empty 200 by default."""
        response = await client.get("https://example.com/anything")

        assert response.status_code == 200
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_reject(self):
        """Test that the reject policy fails unmatched calls."""
        mock = NetworkMock(UnmatchedPolicy.REJECT)

        async with httpx.AsyncClient(transport=mock.transport) as client:
            with pytest.raises(httpx.ConnectError, match="No canned response"):
                await client.get("https://example.com/anything")

        assert len(mock.requests_with("https://example.com/anything", "GET")) == 1


class TestNetworkExpectations:
    """Tests for request count expectations."""

    def test_set_expectation_rejects_zero(self, network_mock):
        """Test that count must be > 0."""
        with pytest.raises(ValueError, match="greater than 0"):
            network_mock.set_expectation(URL, HttpMethod.POST, 0)

    @pytest.mark.asyncio
    async def test_captures_count_down_expectation(self, network_mock, client):
        """Test that matching calls count down the expectation."""
        network_mock.set_expectation(URL, HttpMethod.POST, 2)

        await client.post(URL)
        await client.post(URL)

        latch = network_mock.latch_for(URL, HttpMethod.POST)
        assert await latch.wait(0.01)
        assert network_mock.count_mismatches() == []

    @pytest.mark.asyncio
    async def test_count_mismatch_reported(self, network_mock, client):
        """Test that an extra call is a mismatch."""
        network_mock.set_expectation(URL, HttpMethod.POST, 1)

        await client.post(URL)
        await client.post(URL)

        mismatches = network_mock.count_mismatches()
        assert len(mismatches) == 1
        assert "but received 2" in mismatches[0]

    @pytest.mark.asyncio
    async def test_requests_in_order(self, network_mock, client):
        """Test that captured requests keep their order and bodies."""
        await client.post(URL, content=b"first")
        await client.post(URL, content=b"second")
        await client.get(URL)

        requests = network_mock.requests_with(URL, HttpMethod.POST)
        assert [r.content for r in requests] == [b"first", b"second"]

    @pytest.mark.asyncio
    async def test_reset(self, network_mock, client):
        """Test that reset clears everything."""
        network_mock.set_expectation(URL, HttpMethod.POST, 1)
        network_mock.set_response_for(URL, HttpMethod.POST, CannedResponse(status_code=500))
        await client.post(URL)

        network_mock.reset()

        assert network_mock.expected == {}
        assert network_mock.requests_with(URL, HttpMethod.POST) == []
        assert (await client.post(URL)).status_code == 200
