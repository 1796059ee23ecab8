"""
Carthooks SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for item CRUD, locking and
token issuance. Built on top of the core APIClient; each method is one
REST call.
"""

import builtins
from typing import Any

from carthooks.core.client import APIClient, ClientConfig
from carthooks.core.query import Query, items_path
from carthooks.core.types import Envelope, Item


class CarthooksClient:
    """
    High-level Carthooks API client with typed methods.

    Example:
        client = CarthooksClient(ClientConfig.from_env())

        # List items
        items = client.query(app_id, collection_id).filter("price", "gte", "10").limit(20).get()

        # CRUD
        item = client.items.create(app_id, collection_id, {"title": "x"})
        client.items.update(app_id, collection_id, item.id, {"title": "y"})

        # Locking
        client.items.lock(app_id, collection_id, item.id, lock_id="worker-1", lock_timeout=30)
        client.items.unlock(app_id, collection_id, item.id, lock_id="worker-1")

    """

    def __init__(self, config: ClientConfig | None = None):
        """
        Initialize the client.

        Args:
            config: Connection settings. Defaults to ClientConfig(), which
                targets the public API without credentials. Use
                ClientConfig.from_env() to pick up CARTHOOKS_* variables.

        """
        self._client = APIClient(config)

        # Sub-clients for different domains
        self.items = ItemOperations(self._client)
        self.tokens = TokenOperations(self._client)

    @property
    def config(self) -> ClientConfig:
        """Get the active configuration."""
        return self._client.config

    def configure(self, **changes: Any) -> ClientConfig:
        """Replace configuration fields (base_url, access_token, timeout, ok_statuses)."""
        return self._client.configure(**changes)

    def query(self, app_id: int, collection_id: int) -> Query:
        """Start a list query on a collection."""
        return Query(self._client, app_id, collection_id)


# =============================================================================
# Item Operations
# =============================================================================


class ItemOperations:
    """Operations for managing collection items."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        app_id: int,
        collection_id: int,
        limit: int = 0,
        page: int = 0,
        sort: str = "",
        filters: dict[str, dict[str, str]] | None = None,
    ) -> builtins.list[Item]:
        """
        List one page of items.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            limit: Page size (omitted when <= 0)
            page: Page number (omitted when <= 0)
            sort: Sort expression
            filters: Mapping of field -> operator -> value

        Returns:
            Items on the requested page

        """
        query = Query(self._client, app_id, collection_id).limit(limit).page(page).sort(sort)
        for field, operators in (filters or {}).items():
            for operator, value in operators.items():
                query.filter(field, operator, value)
        return query.get()

    def get(self, app_id: int, collection_id: int, item_id: int) -> Item:
        """
        Get an item by ID.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            item_id: The item ID

        Returns:
            Item with all field values

        Raises:
            DecodeError: If the response carries `data: null` or a non-item payload

        """
        envelope = self._client.get(f"{items_path(app_id, collection_id)}/{item_id}")
        return envelope.bind(Item)

    def create(self, app_id: int, collection_id: int, data: dict[str, Any]) -> Item:
        """
        Create a new item.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            data: Field values (field name -> value)

        Returns:
            Created Item, including its server-assigned ID

        Raises:
            DecodeError: If the response carries `data: null` or a non-item payload

        """
        envelope = self._client.post(items_path(app_id, collection_id), {"data": data})
        return envelope.bind(Item)

    def update(self, app_id: int, collection_id: int, item_id: int, data: dict[str, Any]) -> Envelope:
        """
        Update fields on an item.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            item_id: The item ID
            data: Field values to set

        Returns:
            API response envelope

        """
        return self._client.put(f"{items_path(app_id, collection_id)}/{item_id}", {"data": data})

    def delete(self, app_id: int, collection_id: int, item_id: int) -> Envelope:
        """
        Delete an item.

        Returns:
            API response envelope

        """
        return self._client.delete(f"{items_path(app_id, collection_id)}/{item_id}")

    def lock(
        self,
        app_id: int,
        collection_id: int,
        item_id: int,
        lock_id: str,
        lock_timeout: int = 0,
        subject: str = "",
    ) -> Envelope:
        """
        Lock an item.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            item_id: The item ID
            lock_id: Caller-chosen lock identifier, needed again to unlock
            lock_timeout: Lock lifetime in seconds
            subject: Free-form description of the lock holder

        Returns:
            API response envelope

        """
        return self._client.post(
            f"{items_path(app_id, collection_id)}/{item_id}/lock",
            {
                "lockTimeout": lock_timeout,
                "lockId": lock_id,
                "lockSubject": subject,
            },
        )

    def unlock(self, app_id: int, collection_id: int, item_id: int, lock_id: str) -> Envelope:
        """Release a lock taken with the same lock_id."""
        return self._client.post(
            f"{items_path(app_id, collection_id)}/{item_id}/unlock",
            {"lockId": lock_id},
        )


# =============================================================================
# Token Operations
# =============================================================================


class TokenOperations:
    """Short-lived credentials for submissions, updates and uploads."""

    def __init__(self, client: APIClient):
        self._client = client

    def submission(
        self,
        app_id: int,
        collection_id: int,
        options: dict[str, Any] | None = None,
    ) -> Envelope:
        """
        Get a token authorizing one item submission to a collection.

        Args:
            app_id: The app ID
            collection_id: The collection ID
            options: Token options, sent as the request body

        Returns:
            API response envelope; the token is in ``data``

        """
        return self._client.post(f"/v1/apps/{app_id}/collections/{collection_id}/submission-token", options)

    def update(
        self,
        app_id: int,
        collection_id: int,
        item_id: int,
        options: dict[str, Any] | None = None,
    ) -> Envelope:
        """Get a token authorizing an update of one item."""
        return self._client.post(f"{items_path(app_id, collection_id)}/{item_id}/update-token", options)

    def upload(self) -> Envelope:
        """Get a file upload token."""
        return self._client.post("/v1/uploads/token")
