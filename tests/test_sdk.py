"""Resource operations: one REST call each, fixed method and path."""

import pytest

from carthooks import CarthooksClient, ClientConfig
from carthooks.core.errors import DecodeError, DomainError, HTTPStatusError
from carthooks.core.types import Envelope, Item

BASE = "https://api.test.carthooks.local/v1/apps/10/collections/20"


# =============================================================================
# Client
# =============================================================================


class TestCarthooksClient:
    def test_default_config(self):
        client = CarthooksClient()
        assert client.config == ClientConfig()

    def test_configure_applies_to_operations(self, fake_api, client):
        client.configure(access_token="rotated")
        fake_api.envelope(data={"token": "u"})
        client.tokens.upload()
        assert fake_api.last.headers["Authorization"] == "Bearer rotated"
        assert client.config.access_token == "rotated"

    def test_query_is_scoped(self, client):
        query = client.query(10, 20)
        assert (query.app_id, query.collection_id) == (10, 20)


# =============================================================================
# Item Operations
# =============================================================================


class TestItemOperations:
    """CRUD on collection items."""

    def test_list(self, fake_api, client):
        fake_api.envelope(data=[{"id": 1, "fields": {"a": 1}}])
        items = client.items.list(
            10,
            20,
            limit=5,
            page=2,
            sort="id",
            filters={"price": {"gte": "1", "lte": "9"}},
        )
        assert items == [Item(id=1, fields={"a": 1})]
        url = fake_api.last.url
        assert url.startswith(f"{BASE}/items?")
        for part in (
            "pagination%5BpageSize%5D=5",
            "pagination%5Bpage%5D=2",
            "sort=id",
            "filters%5Bprice%5D%5Bgte%5D=1",
            "filters%5Bprice%5D%5Blte%5D=9",
        ):
            assert part in url

    def test_list_defaults_send_no_params(self, fake_api, client):
        fake_api.envelope(data=[])
        assert client.items.list(10, 20) == []
        assert fake_api.last.url == f"{BASE}/items"

    def test_get(self, fake_api, client):
        fake_api.envelope(data={"ID": 5, "Fields": {"a": 1}})
        item = client.items.get(10, 20, 5)

        assert item == Item(id=5, fields={"a": 1})
        assert fake_api.last.method == "GET"
        assert fake_api.last.url == f"{BASE}/items/5"
        assert fake_api.last.raw_body is None

    def test_get_bind_failure(self, fake_api, client):
        fake_api.envelope(data=[1, 2])
        with pytest.raises(DecodeError):
            client.items.get(10, 20, 5)

    @pytest.mark.parametrize("method", ["get", "create"])
    def test_null_item_payload(self, fake_api, client, method):
        fake_api.envelope(data=None)
        with pytest.raises(DecodeError, match="NoneType"):
            if method == "get":
                client.items.get(10, 20, 5)
            else:
                client.items.create(10, 20, {"title": "x"})

    def test_get_not_found(self, fake_api, client):
        fake_api.envelope(error={"message": "not found", "key": "item.not_found"}, status=404)
        with pytest.raises(HTTPStatusError) as exc_info:
            client.items.get(10, 20, 999)
        assert exc_info.value.status == 404

    def test_create(self, fake_api, client):
        fake_api.envelope(data={"id": 77, "fields": {"title": "x"}})
        item = client.items.create(10, 20, {"title": "x"})

        assert item == Item(id=77, fields={"title": "x"})
        assert fake_api.last.method == "POST"
        assert fake_api.last.url == f"{BASE}/items"
        assert fake_api.last.body == {"data": {"title": "x"}}

    def test_create_201_is_failure_by_default(self, fake_api, client):
        fake_api.envelope(data={"id": 77, "fields": {}}, status=201)
        with pytest.raises(HTTPStatusError):
            client.items.create(10, 20, {"title": "x"})

    def test_create_domain_error(self, fake_api, client):
        fake_api.envelope(error={"message": "title is required", "type": "validation", "key": "field.required"})
        with pytest.raises(DomainError) as exc_info:
            client.items.create(10, 20, {})
        assert exc_info.value.key == "field.required"

    def test_update(self, fake_api, client):
        fake_api.envelope(data={"id": 5}, trace_id="t-upd")
        envelope = client.items.update(10, 20, 5, {"title": "y", "tags": ["a"]})

        assert isinstance(envelope, Envelope)
        assert envelope.trace_id == "t-upd"
        assert fake_api.last.method == "PUT"
        assert fake_api.last.url == f"{BASE}/items/5"
        assert fake_api.last.body == {"data": {"title": "y", "tags": ["a"]}}

    def test_delete(self, fake_api, client):
        fake_api.envelope(data=None)
        envelope = client.items.delete(10, 20, 5)

        assert envelope.data is None
        assert fake_api.last.method == "DELETE"
        assert fake_api.last.url == f"{BASE}/items/5"
        assert fake_api.last.raw_body is None


# =============================================================================
# Locking
# =============================================================================


class TestLocking:
    def test_lock_then_unlock(self, fake_api, client):
        fake_api.envelope(data={"locked": True}).envelope(data={"locked": False})

        locked = client.items.lock(10, 20, 5, lock_id="worker-1", lock_timeout=30, subject="import job")
        unlocked = client.items.unlock(10, 20, 5, lock_id="worker-1")

        assert locked.data == {"locked": True}
        assert unlocked.data == {"locked": False}

        lock_req, unlock_req = fake_api.requests
        assert lock_req.method == "POST"
        assert lock_req.url == f"{BASE}/items/5/lock"
        assert lock_req.body == {"lockTimeout": 30, "lockId": "worker-1", "lockSubject": "import job"}
        assert unlock_req.method == "POST"
        assert unlock_req.url == f"{BASE}/items/5/unlock"
        assert unlock_req.body == {"lockId": "worker-1"}

    def test_lock_defaults(self, fake_api, client):
        fake_api.envelope(data={})
        client.items.lock(10, 20, 5, lock_id="x")
        assert fake_api.last.body == {"lockTimeout": 0, "lockId": "x", "lockSubject": ""}

    def test_lock_held_elsewhere(self, fake_api, client):
        fake_api.envelope(error={"message": "Item is locked", "type": "conflict", "key": "item.locked"})
        with pytest.raises(DomainError) as exc_info:
            client.items.lock(10, 20, 5, lock_id="worker-2")
        assert exc_info.value.key == "item.locked"


# =============================================================================
# Token Operations
# =============================================================================


class TestTokenOperations:
    def test_submission_token(self, fake_api, client):
        fake_api.envelope(data={"token": "sub-123"})
        envelope = client.tokens.submission(10, 20, {"expires_in": 600})

        assert envelope.bind(lambda d: d["token"]) == "sub-123"
        assert fake_api.last.method == "POST"
        assert fake_api.last.url == f"{BASE}/submission-token"
        assert fake_api.last.body == {"expires_in": 600}

    def test_submission_token_without_options(self, fake_api, client):
        fake_api.envelope(data={"token": "sub-1"})
        client.tokens.submission(10, 20)
        assert fake_api.last.raw_body is None

    def test_update_token(self, fake_api, client):
        fake_api.envelope(data={"token": "upd-1"})
        envelope = client.tokens.update(10, 20, 5, {"fields": ["title"]})

        assert envelope.data == {"token": "upd-1"}
        assert fake_api.last.method == "POST"
        assert fake_api.last.url == f"{BASE}/items/5/update-token"
        assert fake_api.last.body == {"fields": ["title"]}

    def test_upload_token(self, fake_api, client):
        fake_api.envelope(data={"token": "up-1", "url": "https://upload.example.com"})
        envelope = client.tokens.upload()

        assert envelope.data["token"] == "up-1"
        assert fake_api.last.method == "POST"
        assert fake_api.last.url == "https://api.test.carthooks.local/v1/uploads/token"
        assert fake_api.last.raw_body is None
