"""Shared constants for functional tests."""

from mobile_core.config import EDGE_INTERACT_URL, env_float
from mobile_core.models import EventSource, EventType


class Defaults:
    """Assertion wait times in seconds, overridable from the environment."""

    WAIT_EVENT_TIMEOUT = env_float("FUNCTEST_WAIT_EVENT_TIMEOUT", 2.0)
    WAIT_NETWORK_REQUEST_TIMEOUT = env_float("FUNCTEST_WAIT_NETWORK_REQUEST_TIMEOUT", 2.0)
    WAIT_TIMEOUT = env_float("FUNCTEST_WAIT_TIMEOUT", 1.0)


class FunctionalTestConst:
    """Event types/sources and endpoints used by the functional tests."""

    EventType = EventType
    EventSource = EventSource
    Defaults = Defaults

    EDGE_INTERACT_URL = EDGE_INTERACT_URL
