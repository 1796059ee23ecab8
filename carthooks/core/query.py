"""
Fluent query builder for listing collection items.

    items = client.query(app_id, collection_id).filter("status", "eq", "open").limit(20).get()

Rendered parameters:

    pagination[pageSize]   limit, only when > 0
    pagination[page]       page, only when > 0
    sort                   sort expression, only when non-empty
    filters[F][OP]         one per (field, operator) pair
"""

import logging
import urllib.parse
from typing import TYPE_CHECKING

from carthooks.core.errors import ValidationError
from carthooks.core.types import Item

if TYPE_CHECKING:
    from carthooks.core.client import APIClient

logger = logging.getLogger(__name__)


def items_path(app_id: int, collection_id: int) -> str:
    """Path of a collection's items endpoint."""
    return f"/v1/apps/{app_id}/collections/{collection_id}/items"


class Query:
    """
    Builder for one list call on an app/collection pair.

    Single owner: build it, call get(), drop it. Not safe for concurrent mutation.
    """

    def __init__(self, client: "APIClient", app_id: int, collection_id: int):
        self._client = client
        self.app_id = app_id
        self.collection_id = collection_id
        self._limit = 0
        self._page = 0
        self._sort = ""
        self._filters: dict[str, dict[str, str]] = {}

    def limit(self, limit: int) -> "Query":
        """Set the page size."""
        self._limit = limit
        return self

    def page(self, page: int) -> "Query":
        """Set the page number."""
        self._page = page
        return self

    def sort(self, expr: str) -> "Query":
        """Set the sort expression, passed through as-is."""
        self._sort = expr
        return self

    def filter(self, field: str, operator: str, value: str) -> "Query":
        """
        Add a filter condition.

        Names are not checked locally; the API rejects unknown ones. Setting
        the same field and operator again replaces the earlier value.

        Raises:
            ValidationError: If value is not a string

        """
        if not isinstance(value, str):
            raise ValidationError(
                f"Filter value for {field}[{operator}] must be a string, got {type(value).__name__}",
                details={"field": field, "operator": operator},
            )
        self._filters.setdefault(field, {})[operator] = value
        return self

    @property
    def filters(self) -> dict[str, dict[str, str]]:
        """Copy of the accumulated filters."""
        return {field: dict(ops) for field, ops in self._filters.items()}

    def params(self) -> list[tuple[str, str]]:
        """Render the builder state as query parameters."""
        params: list[tuple[str, str]] = []
        if self._limit > 0:
            params.append(("pagination[pageSize]", str(self._limit)))
        if self._page > 0:
            params.append(("pagination[page]", str(self._page)))
        if self._sort:
            params.append(("sort", self._sort))
        for field, operators in self._filters.items():
            for operator, value in operators.items():
                params.append((f"filters[{field}][{operator}]", value))
        return params

    def encode(self) -> str:
        """URL-encode the parameters, sorted by name."""
        return urllib.parse.urlencode(sorted(self.params(), key=lambda p: p[0]))

    def url(self) -> str:
        """Full path with query string."""
        query = self.encode()
        path = items_path(self.app_id, self.collection_id)
        return f"{path}?{query}" if query else path

    def get(self) -> list[Item]:
        """
        Fetch the matching items.

        Returns:
            Items on the requested page

        Raises:
            BuildError, TransportError, HTTPStatusError, DecodeError, DomainError

        """
        url = self.url()
        logger.debug("Listing items: %s", url)
        envelope = self._client.get(url)
        return envelope.bind(list[Item])
