"""
Carthooks - Python client for the Carthooks API.

Layers:
- core: Wire types, HTTP client and query builder
- sdk: High-level CarthooksClient with nice ergonomics
- cli: Command-line interface
"""

from carthooks.core.client import ClientConfig
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
from carthooks.core.types import Envelope, Item
from carthooks.sdk import CarthooksClient

__version__ = "0.1.0"
__all__ = [
    "APIError",
    "BuildError",
    "CarthooksClient",
    "CarthooksError",
    "ClientConfig",
    "DecodeError",
    "DomainError",
    "Envelope",
    "HTTPStatusError",
    "Item",
    "TransportError",
    "ValidationError",
]
