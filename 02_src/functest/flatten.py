"""Flattening of nested payloads into dotted-path keys."""

import json
from typing import Any

import httpx


def flatten_dict(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested dicts and lists into leaf keys.

    {"events": [{"xdm": {"eventType": "t"}}]} -> {"events[0].xdm.eventType": "t"}

    Empty dicts and lists are kept as leaves.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        _flatten_value(value, path, flat)
    return flat


def _flatten_value(value: Any, path: str, flat: dict[str, Any]) -> None:
    if isinstance(value, dict) and value:
        for key, item in value.items():
            _flatten_value(item, f"{path}.{key}", flat)
    elif isinstance(value, list) and value:
        for index, item in enumerate(value):
            _flatten_value(item, f"{path}[{index}]", flat)
    else:
        flat[path] = value


def flatten_request_body(request: httpx.Request) -> dict[str, Any]:
    """Flatten a captured request's JSON body.

    Empty, non-JSON or non-object bodies give {}.
    """
    if not request.content:
        return {}
    try:
        body = json.loads(request.content)
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    return flatten_dict(body)
