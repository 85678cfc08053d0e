"""Edge extension: sends experience events to the Edge Network."""

import json

from pydantic import ValidationError

from ..config import EDGE_INTERACT_URL
from ..logging_config import get_logger
from ..models import (
    EdgeRequest,
    EdgeResponse,
    Event,
    EventSource,
    EventType,
    ExperienceEvent,
    HttpMethod,
    NetworkRequest,
)
from .base import Extension
from .configuration import ConfigurationExtension

logger = get_logger(__name__)

CONFIG_ID_KEY = "edge.configId"
RECORD_SEPARATOR = "\u0000"


def split_streamed_body(body: str) -> list[str]:
    """Split a streamed Edge response into its JSON chunks."""
    chunks = []
    for part in body.split(RECORD_SEPARATOR):
        for line in part.splitlines():
            if line.strip():
                chunks.append(line)
    return chunks


class Edge(Extension):
    """One network request per experience event, no batching or retries."""

    name = "com.adobe.edge"
    friendly_name = "AEPEdge"
    version = "1.0.0"

    async def on_registered(self) -> None:
        self._api.register_listener(
            EventType.EDGE, EventSource.REQUEST_CONTENT, self._handle_request
        )

    def send_event(self, experience_event: ExperienceEvent) -> None:
        """Queue an experience event for delivery."""
        self._api.dispatch(
            Event(
                name="AEP Request Event",
                type=EventType.EDGE,
                source=EventSource.REQUEST_CONTENT,
                data=experience_event.model_dump(exclude_none=True),
            )
        )

    async def _handle_request(self, event: Event) -> None:
        config = self._api.get_shared_state(ConfigurationExtension.name) or {}
        config_id = config.get(CONFIG_ID_KEY)
        if not config_id:
            logger.warning("%s is not configured, dropping %s", CONFIG_ID_KEY, event.id)
            return

        try:
            experience_event = ExperienceEvent.model_validate(event.data or {})
        except ValidationError as e:
            logger.warning("Invalid experience event %s: %s", event.id, e)
            return

        xdm = {
            **experience_event.xdm,
            "_id": event.id,
            "timestamp": event.timestamp.isoformat(),
        }
        body = EdgeRequest(
            events=[ExperienceEvent(xdm=xdm, data=experience_event.data)]
        ).model_dump_json(exclude_none=True)

        connection = await self._api.network.send(
            NetworkRequest(
                url=f"{EDGE_INTERACT_URL}?configId={config_id}&requestId={event.id}",
                method=HttpMethod.POST,
                body=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        )

        if connection.error is not None:
            logger.warning("Edge request %s failed: %s", event.id, connection.error)
            return

        self._handle_response(event, connection.text)

    def _handle_response(self, request: Event, body: str) -> None:
        for chunk in split_streamed_body(body):
            try:
                response = EdgeResponse.model_validate_json(chunk)
            except ValidationError:
                logger.warning("Unparseable Edge response chunk: %s", chunk[:100])
                continue

            for handle in response.handle:
                self._api.dispatch(
                    request.create_response(
                        name="AEP Response Event Handle",
                        type=EventType.EDGE,
                        source=EventSource.RESPONSE_CONTENT,
                        data={
                            "type": handle.type,
                            "payload": handle.payload,
                            "requestId": response.requestId,
                            "requestEventId": request.id,
                        },
                    )
                )

            for error in response.errors:
                self._api.dispatch(
                    request.create_response(
                        name="AEP Error Response",
                        type=EventType.EDGE,
                        source=EventSource.ERROR_RESPONSE_CONTENT,
                        data={
                            **error,
                            "requestId": response.requestId,
                            "requestEventId": request.id,
                        },
                    )
                )

            if response.warnings:
                logger.debug("Edge warnings: %s", json.dumps(response.warnings))
