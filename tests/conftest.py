"""Shared pytest fixtures."""

import copy
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from taskvault.app import App
from taskvault.config import Config
from taskvault.core.crypto.cipher import FieldCipher
from taskvault.web.server import create_fastapi_app

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
AES_SECRET = "0123456789abcdef0123456789abcdef"


# === In-memory stand-in for the pymongo async collections the services use ===


@dataclass
class FakeInsertOneResult:
    inserted_id: Any


@dataclass
class FakeDeleteResult:
    deleted_count: int


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = doc.get(key)
        if isinstance(condition, dict) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or re.search(condition["$regex"], value, flags) is None:
                return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: str | list[tuple[str, int]], direction: int = 1) -> "FakeCursor":
        self._sort = [(key_or_list, direction)] if isinstance(key_or_list, str) else list(key_or_list)
        return self

    def skip(self, skip: int) -> "FakeCursor":
        self._skip = skip
        return self

    def limit(self, limit: int) -> "FakeCursor":
        self._limit = limit
        return self

    def _materialize(self) -> list[dict[str, Any]]:
        docs = list(self._docs)
        for key, direction in reversed(self._sort):
            docs.sort(key=lambda d: d[key], reverse=direction < 0)
        docs = docs[self._skip :]
        if self._limit:
            docs = docs[: self._limit]
        return [copy.deepcopy(d) for d in docs]

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._materialize()

    def __aiter__(self):  # type: ignore[no-untyped-def]
        return self._iterate()

    async def _iterate(self):  # type: ignore[no-untyped-def]
        for doc in self._materialize():
            yield doc


class FakeCollection:
    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.unique_fields: set[str] = set()

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        if unique and len(keys) == 1:
            self.unique_fields.add(keys[0][0])
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    async def insert_one(self, doc: dict[str, Any]) -> FakeInsertOneResult:
        for field in self.unique_fields | {"_id"}:
            if any(existing.get(field) == doc.get(field) for existing in self.docs):
                raise DuplicateKeyError(f"duplicate key on {field}")
        self.docs.append(copy.deepcopy(doc))
        return FakeInsertOneResult(inserted_id=doc["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        doc = next((d for d in self.docs if _matches(d, query)), None)
        return copy.deepcopy(doc)

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for d in self.docs if _matches(d, query))

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], return_document: bool = ReturnDocument.BEFORE
    ) -> dict[str, Any] | None:
        doc = next((d for d in self.docs if _matches(d, query)), None)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        doc.update(copy.deepcopy(update.get("$set", {})))
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query: dict[str, Any]) -> FakeDeleteResult:
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return FakeDeleteResult(deleted_count=1)
        return FakeDeleteResult(deleted_count=0)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


# === Fixtures ===


@pytest.fixture
def config():
    """Configuration with valid secrets and cookies usable over plain HTTP."""
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/taskvault_test",
        jwt_secret=JWT_SECRET,
        aes_secret=AES_SECRET,
        cookie_secure=False,
    )


@pytest.fixture
def cipher():
    return FieldCipher(AES_SECRET.encode("utf-8"))


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def fastapi_app(config, database):
    return create_fastapi_app(App(config, database), config)


@pytest.fixture
def client(fastapi_app) -> Iterator[TestClient]:
    """Anonymous API client; entering it runs application startup."""
    with TestClient(fastapi_app) as test_client:
        yield test_client


@pytest.fixture
def new_client(fastapi_app, client):
    """Factory for extra clients, each with its own cookie jar."""

    def make() -> TestClient:
        return TestClient(fastapi_app)

    return make


def register_client(client: TestClient, email: str, password: str = "secret123") -> TestClient:
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return client


@pytest.fixture
def alice(new_client):
    """Client logged in as alice@example.com."""
    return register_client(new_client(), "alice@example.com")


@pytest.fixture
def bob(new_client):
    """Client logged in as bob@example.com."""
    return register_client(new_client(), "bob@example.com")
