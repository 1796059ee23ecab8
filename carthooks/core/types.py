"""
Core types for the Carthooks API wire format.

Every response body is wrapped in the same envelope:

    {"data": ..., "meta": {...}, "trace_id": "...", "error": null | {...}}

These dataclasses decode that envelope and bind its payload to typed values.
"""

import json
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from carthooks.core.errors import DecodeError

# Item fields are schema-less, so values are any JSON value.
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Get a key case-insensitively, preferring an exact match."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if key.lower() == lowered:
            return value
    return None


def _expect(value: Any, kinds: type | tuple[type, ...], what: str) -> Any:
    if value is not None and not isinstance(value, kinds):
        raise DecodeError(
            f"Invalid {what}: expected {_kind_name(kinds)}, got {type(value).__name__}",
            details={"value": value},
        )
    return value


def _kind_name(kinds: type | tuple[type, ...]) -> str:
    if isinstance(kinds, tuple):
        return " or ".join(k.__name__ for k in kinds)
    return kinds.__name__


# =============================================================================
# Envelope Types
# =============================================================================


@dataclass
class ResponseError:
    """A server-declared error carried in the envelope."""

    message: str = ""
    type: str = ""
    key: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResponseError":
        """Create from the envelope's error object."""
        return cls(
            message=_expect(data.get("message"), str, "error.message") or "",
            type=_expect(data.get("type"), str, "error.type") or "",
            key=_expect(data.get("key"), str, "error.key") or "",
        )


@dataclass
class Envelope:
    """The decoded response envelope."""

    data: Any = None
    meta: dict[str, Any] = field(default_factory=dict)
    trace_id: str = ""
    error: ResponseError | None = None

    @property
    def failed(self) -> bool:
        """Whether the server declared an error, whatever the HTTP status."""
        return self.error is not None

    @classmethod
    def from_dict(cls, data: Any) -> "Envelope":
        """Create from a decoded response body."""
        if not isinstance(data, dict):
            raise DecodeError(f"Invalid response envelope: expected object, got {type(data).__name__}")

        raw_error = _expect(data.get("error"), dict, "error")
        return cls(
            data=data.get("data"),
            meta=_expect(data.get("meta"), dict, "meta") or {},
            trace_id=_expect(data.get("trace_id"), str, "trace_id") or "",
            error=ResponseError.from_dict(raw_error) if raw_error is not None else None,
        )

    @classmethod
    def from_json(cls, body: bytes | str) -> "Envelope":
        """Decode a raw response body."""
        try:
            decoded = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid JSON response: {e}") from e
        return cls.from_dict(decoded)

    def bind(self, target: Any) -> Any:
        """
        Bind the data payload to a typed value.

        Args:
            target: A class with a ``from_dict`` classmethod (e.g. Item),
                a ``list[X]`` alias, or any callable taking the raw payload

        Returns:
            The bound value

        Raises:
            DecodeError: If the payload does not match the target's shape

        """
        return _bind(self.data, target)


def _bind(value: Any, target: Any) -> Any:
    if typing.get_origin(target) is list:
        (item_type,) = typing.get_args(target) or (None,)
        if value is None:
            return []
        if not isinstance(value, list):
            raise DecodeError(f"Cannot bind {type(value).__name__} to a list", details={"value": value})
        if item_type is None or item_type is Any:
            return list(value)
        return [_bind(v, item_type) for v in value]

    converter: Callable[[Any], Any] = getattr(target, "from_dict", target)
    try:
        return converter(value)
    except DecodeError:
        raise
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise DecodeError(f"Cannot bind payload to {getattr(target, '__name__', target)}: {e}") from e


# =============================================================================
# Item Types
# =============================================================================


@dataclass
class Item:
    """A record in a collection. Fields vary per collection."""

    id: int = 0
    fields: dict[str, JSONValue] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        """Get a field value."""
        return self.fields.get(name, default)

    @classmethod
    def from_dict(cls, data: Any) -> "Item":
        """Create from API response dict. Keys match case-insensitively."""
        if not isinstance(data, dict):
            raise DecodeError(
                f"Cannot bind {type(data).__name__} to Item",
                details={"value": data},
            )

        item_id = _lookup(data, "id")
        if isinstance(item_id, bool) or (item_id is not None and not isinstance(item_id, int)):
            raise DecodeError(f"Invalid item id: {item_id!r}", details={"value": data})

        fields = _expect(_lookup(data, "fields"), dict, "item fields")
        return cls(id=item_id or 0, fields=dict(fields or {}))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {"id": self.id, "fields": self.fields}
