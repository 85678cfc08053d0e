"""Mock network layer: canned responses and captured requests."""

import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

import httpx

from mobile_core.logging_config import get_logger
from mobile_core.models import HttpMethod

from .latch import CountDownLatch

logger = get_logger(__name__)


@dataclass(frozen=True)
class NetworkRequestSpec:
    """Endpoint key. Matches on scheme, host, path and method; query is ignored."""

    scheme: str
    host: str
    path: str
    method: str

    @classmethod
    def of(cls, url: str | httpx.URL, method: HttpMethod | str) -> "NetworkRequestSpec":
        parts = urlsplit(str(url))
        method_name = method.value if isinstance(method, HttpMethod) else str(method)
        return cls(
            scheme=parts.scheme.lower(),
            host=parts.hostname or "",
            path=parts.path.rstrip("/") or "/",
            method=method_name.upper(),
        )

    def __str__(self) -> str:
        return f"{self.method} {self.scheme}://{self.host}{self.path}"


@dataclass
class CannedResponse:
    """A pre-programmed reply. `times=None` serves every remaining call."""

    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    error: httpx.HTTPError | None = None
    times: int | None = None

    def to_response(self, request: httpx.Request) -> httpx.Response:
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            headers=self.headers,
            content=self.body,
            request=request,
        )


class UnmatchedPolicy(str, Enum):
    """What calls with no canned response receive."""

    DEFAULT_RESPONSE = "default_response"
    REJECT = "reject"


@dataclass
class CapturedRequest:
    """A request seen by the mock and the canned response it was given."""

    request: httpx.Request
    response: CannedResponse | None


class _Slot:
    def __init__(self, response: CannedResponse):
        self.response = response
        self.remaining = response.times


class NetworkMock:
    """httpx transport that records every call and answers from a queue.

    Matching a call to its endpoint and taking a slot from that endpoint's
    response queue happen under one lock, so concurrent calls never share a
    limited slot.
    """

    def __init__(self, unmatched_policy: UnmatchedPolicy = UnmatchedPolicy.DEFAULT_RESPONSE):
        self.unmatched_policy = unmatched_policy
        self.debug_enabled = False
        self._lock = threading.Lock()
        self._responses: dict[NetworkRequestSpec, deque[_Slot]] = {}
        self._captured: list[tuple[NetworkRequestSpec, CapturedRequest]] = []
        self._expected: dict[NetworkRequestSpec, CountDownLatch] = {}
        self._transport = httpx.MockTransport(self._handle)

    @property
    def transport(self) -> httpx.MockTransport:
        return self._transport

    def set_expectation(self, url: str, method: HttpMethod | str, count: int) -> None:
        """Expect exactly `count` calls to an endpoint. count must be > 0."""
        if count <= 0:
            raise ValueError(
                f"Expected network request count should be greater than 0, got {count}"
            )
        with self._lock:
            self._expected[NetworkRequestSpec.of(url, method)] = CountDownLatch(count)

    def set_response_for(
        self, url: str, method: HttpMethod | str, response: CannedResponse
    ) -> None:
        """Queue a canned response for an endpoint."""
        if response.times is not None and response.times <= 0:
            raise ValueError(f"times must be > 0 or None, got {response.times}")
        spec = NetworkRequestSpec.of(url, method)
        with self._lock:
            self._responses.setdefault(spec, deque()).append(_Slot(response))

    @property
    def expected(self) -> dict[NetworkRequestSpec, CountDownLatch]:
        with self._lock:
            return dict(self._expected)

    def latch_for(self, url: str, method: HttpMethod | str) -> CountDownLatch | None:
        with self._lock:
            return self._expected.get(NetworkRequestSpec.of(url, method))

    def captured(self, url: str, method: HttpMethod | str) -> list[CapturedRequest]:
        """Captured calls to an endpoint, in the order they were made."""
        spec = NetworkRequestSpec.of(url, method)
        with self._lock:
            return [c for s, c in self._captured if s == spec]

    def requests_with(self, url: str, method: HttpMethod | str) -> list[httpx.Request]:
        return [c.request for c in self.captured(url, method)]

    def captured_count(self, spec: NetworkRequestSpec) -> int:
        with self._lock:
            return sum(1 for s, _ in self._captured if s == spec)

    def count_mismatches(self, skip: set[NetworkRequestSpec] = frozenset()) -> list[str]:
        """Describe every expected endpoint whose call count differs."""
        mismatches = []
        for spec, latch in self.expected.items():
            if spec in skip:
                continue
            received = self.captured_count(spec)
            if received != latch.initial_count:
                mismatches.append(
                    f"Expected {latch.initial_count} network requests for {spec}, "
                    f"but received {received}"
                )
        return mismatches

    def reset(self) -> None:
        with self._lock:
            self._responses.clear()
            self._captured.clear()
            self._expected.clear()

    def _take_slot(self, spec: NetworkRequestSpec) -> CannedResponse | None:
        queue = self._responses.get(spec)
        while queue:
            slot = queue[0]
            if slot.remaining is None:
                return slot.response
            if slot.remaining > 0:
                slot.remaining -= 1
                if slot.remaining == 0:
                    queue.popleft()
                return slot.response
            queue.popleft()
        return None

    def _handle(self, request: httpx.Request) -> httpx.Response:
        spec = NetworkRequestSpec.of(request.url, request.method)

        with self._lock:
            canned = self._take_slot(spec)
            self._captured.append((spec, CapturedRequest(request, canned)))
            latch = self._expected.get(spec)
            if latch:
                latch.count_down()

        if self.debug_enabled:
            logger.debug("Captured network request %s", spec)

        if canned is not None:
            return canned.to_response(request)

        if self.unmatched_policy is UnmatchedPolicy.REJECT:
            raise httpx.ConnectError(f"No canned response for {spec}", request=request)
        return httpx.Response(200, content=b"", request=request)
