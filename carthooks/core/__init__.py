"""
Core layer - Wire types, HTTP client and query builder.

This layer provides:
- Envelope and Item dataclasses matching the API wire format
- Low-level HTTP client with auth and error normalization
- The list query builder
"""

from carthooks.core.client import APIClient, ClientConfig
from carthooks.core.errors import (
    APIError,
    BuildError,
    CarthooksError,
    DecodeError,
    DomainError,
    HTTPStatusError,
    TransportError,
    ValidationError,
)
from carthooks.core.query import Query
from carthooks.core.types import Envelope, Item, JSONValue, ResponseError

__all__ = [
    "APIClient",
    "APIError",
    "BuildError",
    "CarthooksError",
    "ClientConfig",
    "DecodeError",
    "DomainError",
    "Envelope",
    "HTTPStatusError",
    "Item",
    "JSONValue",
    "Query",
    "ResponseError",
    "TransportError",
    "ValidationError",
]
