from __future__ import annotations

import threading

import pytest

from d1kit.errors import DatabaseNotFoundError, TransportError
from d1kit.registry import IdentityRegistry


def test_register_then_resolve():
    registry = IdentityRegistry()
    registry.register("t1", "id-1")

    assert registry.resolve("t1") == "id-1"
    assert "t1" in registry
    assert registry.name_for("id-1") == "t1"


def test_resolve_unknown_name_raises_not_found():
    registry = IdentityRegistry()

    with pytest.raises(DatabaseNotFoundError, match="Invalid db id: missing") as excinfo:
        registry.resolve("missing")

    assert isinstance(excinfo.value, TransportError)
    assert isinstance(excinfo.value, LookupError)
    assert excinfo.value.key == "missing"


def test_registering_a_name_again_replaces_its_identifier():
    registry = IdentityRegistry()
    registry.register("t1", "id-1")
    registry.register("t1", "id-2")

    assert registry.resolve("t1") == "id-2"
    assert len(registry) == 1
    assert registry.name_for("id-1") == ""


def test_two_names_may_share_an_identifier():
    registry = IdentityRegistry()
    registry.register("a", "id-1")
    registry.register("b", "id-1")

    assert registry.ids() == ["id-1"]
    assert registry.names() == ["a", "b"]


def test_order_follows_latest_registration():
    registry = IdentityRegistry()
    registry.register("a", "id-1")
    registry.register("b", "id-2")
    registry.register("a", "id-3")

    assert registry.names() == ["b", "a"]
    assert registry.ids() == ["id-2", "id-3"]


def test_remove_drops_every_name_for_identifier():
    registry = IdentityRegistry()
    registry.register("a", "id-1")
    registry.register("b", "id-1")
    registry.register("c", "id-2")

    registry.remove("id-1")
    registry.remove("never-registered")

    assert registry.names() == ["c"]


def test_concurrent_registration():
    registry = IdentityRegistry()

    def _register(start: int) -> None:
        for i in range(start, start + 100):
            registry.register(f"db-{i}", f"id-{i}")

    threads = [threading.Thread(target=_register, args=(n * 100,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry) == 800
    assert registry.resolve("db-799") == "id-799"
