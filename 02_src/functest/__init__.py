"""Functional test harness: event expectations and network mocking."""

from .constants import Defaults, FunctionalTestConst
from .context import FunctionalTestContext
from .errors import ExpectationFailure
from .expectations import EventExpectations, EventSpec
from .flatten import flatten_dict, flatten_request_body
from .latch import CountDownLatch
from .network import (
    CannedResponse,
    CapturedRequest,
    NetworkMock,
    NetworkRequestSpec,
    UnmatchedPolicy,
)

__all__ = [
    # Context
    "FunctionalTestContext",
    "FunctionalTestConst",
    "Defaults",
    "ExpectationFailure",
    # Events
    "EventSpec",
    "EventExpectations",
    "CountDownLatch",
    # Network
    "NetworkMock",
    "NetworkRequestSpec",
    "CannedResponse",
    "CapturedRequest",
    "UnmatchedPolicy",
    # Helpers
    "flatten_dict",
    "flatten_request_body",
]
