"""
Shared fixtures — every test app runs on a fresh in-memory store injected
through create_app, so no test touches disk or the network.
"""
import pytest
from fastapi.testclient import TestClient

from chama.repositories.memory_store import MemoryStore
from chama.repositories.names import MEMBERS
from main import create_app

PIN = "1234"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as c:
        yield c


def _set_role(store, email, role):
    members, revision = store.snapshot(MEMBERS)
    for m in members:
        if m["email"] == email:
            m["role"] = role
    store.save(MEMBERS, members, expected_revision=revision)


@pytest.fixture
def member_factory(client, store):
    """Register a member, give it ``role`` and return (email, auth headers)."""

    def _make(name, role="member", email=None):
        email = email or f"{name.lower()}@x.com"
        r = client.post("/members", json={"name": name, "email": email, "pin": PIN})
        assert r.status_code == 201, r.text
        if role != "member":
            _set_role(store, email, role)
        r = client.post("/auth", json={"email": email, "pin": PIN})
        assert r.status_code == 200, r.text
        return email, {"Authorization": f"Bearer {r.json()['token']}"}

    return _make


@pytest.fixture
def chair(member_factory):
    return member_factory("Chair", "chairperson")


@pytest.fixture
def treasurer(member_factory):
    return member_factory("Tess", "treasurer")


@pytest.fixture
def secretary(member_factory):
    return member_factory("Sam", "secretary")


@pytest.fixture
def alice(member_factory):
    return member_factory("Alice")
