"""Edge Network wire models."""

from typing import Any

from pydantic import BaseModel, Field


class ExperienceEvent(BaseModel):
    """An event sent to the Edge Network."""

    xdm: dict[str, Any]
    data: dict[str, Any] | None = None


class EdgeRequest(BaseModel):
    """Body of an Edge interact request."""

    events: list[ExperienceEvent]


class EdgeHandle(BaseModel):
    """A single handle in an Edge response."""

    type: str | None = None
    payload: list[dict[str, Any]] = Field(default_factory=list)


class EdgeResponse(BaseModel):
    """One streamed chunk of an Edge response."""

    requestId: str | None = None
    handle: list[EdgeHandle] = Field(default_factory=list)
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[dict[str, Any]] = Field(default_factory=list)
