"""Network request/response data models."""

from dataclasses import dataclass, field
from enum import Enum

from ..config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT


class HttpMethod(str, Enum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"


@dataclass
class NetworkRequest:
    """An outbound request issued by an extension."""

    url: str
    method: HttpMethod = HttpMethod.GET
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT


@dataclass
class HttpConnection:
    """Result of a network call. Transport failures land in `error`."""

    data: bytes | None = None
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """True for a response with a 2xx status and no error."""
        return (
            self.error is None
            and self.status_code is not None
            and 200 <= self.status_code < 300
        )

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return (self.data or b"").decode("utf-8", errors="replace")
