"""Default query and body encoders used by HttpxTransport."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from actorflow.transport.models import CONTENT_TYPE, get_header

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _scalar(value.value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value)


def _pairs(values: Mapping[str, Any]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, list | tuple | set | frozenset):
            pairs.extend((key, _scalar(item)) for item in value if item is not None)
        else:
            pairs.append((key, _scalar(value)))
    return pairs


def serialize_params(params: Mapping[str, Any] | None) -> str:
    """Encode query parameters.

    None values are dropped, sequences repeat their key (``?id=1&id=2``),
    booleans are lowercase. Insertion order is preserved.
    """
    if not params:
        return ""
    return urlencode(_pairs(params))


def _is_json(content_type: str | None) -> bool:
    if not content_type:
        return False
    media = content_type.split(";", 1)[0].strip().lower()
    return media == JSON_CONTENT_TYPE or media.endswith("+json")


def transform_request(data: Any, headers: dict[str, str]) -> str | bytes | None:
    """Encode a request body according to the declared content type.

    Args:
        data: Body value from the call configuration.
        headers: Outgoing headers (content type looked up case-insensitively).

    Returns:
        Encoded body, or None when there is nothing to send.
    """
    if data is None:
        return None
    if isinstance(data, str | bytes | bytearray):
        return bytes(data) if isinstance(data, bytearray) else data

    content_type = get_header(headers, CONTENT_TYPE)
    if content_type and content_type.split(";", 1)[0].strip().lower() == FORM_CONTENT_TYPE:
        if not isinstance(data, Mapping):
            raise TypeError(f"Form body must be a mapping, got {type(data).__name__}")
        return urlencode(_pairs(data))

    if content_type is None or _is_json(content_type):
        return json.dumps(data, default=_scalar)

    raise TypeError(f"Cannot encode {type(data).__name__} body as {content_type!r}")


def decode_body(content: bytes, content_type: str | None) -> Any:
    """Decode a response body: JSON when declared, text otherwise."""
    if not content:
        return None
    if _is_json(content_type):
        return json.loads(content)
    try:
        return content.decode()
    except UnicodeDecodeError:
        return content
