from __future__ import annotations

import threading

import pytest

from state.login_store import InMemoryLoginStateStore


def test_get_is_absent_before_put():
    store = InMemoryLoginStateStore()
    assert store.get("u1") is None
    assert "u1" not in store
    assert len(store) == 0


def test_last_write_wins():
    store = InMemoryLoginStateStore()
    store.put("u1", "Alice")
    assert store.get("u1") == "Alice"
    store.put("u1", "Bob")
    assert store.get("u1") == "Bob"
    assert len(store) == 1


def test_users_are_independent():
    store = InMemoryLoginStateStore()
    store.put("u1", "Alice")
    assert store.get("u2") is None


def test_empty_user_id_rejected():
    store = InMemoryLoginStateStore()
    with pytest.raises(ValueError):
        store.put("", "Alice")


def test_concurrent_puts_from_threads():
    store = InMemoryLoginStateStore()

    def worker(n: int) -> None:
        for i in range(200):
            store.put(f"user-{n}-{i}", f"name-{i}")
            store.get(f"user-{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 8 * 200
    assert store.get("user-3-150") == "name-150"
