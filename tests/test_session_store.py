import contextvars

from storage.session_store import ContextSessionStore, InMemorySessionStore


def test_in_memory_store_roundtrip():
    store = InMemorySessionStore()
    assert store.get("request_id") is None
    store.set("request_id", "r1")
    assert store.get("request_id") == "r1"
    store.clear()
    assert store.get("request_id") is None


def test_context_store_isolated_per_context():
    store = ContextSessionStore()
    store.set("request_id", "outer")

    def _inner():
        assert store.get("request_id") == "outer"
        store.set("request_id", "inner")
        return store.get("request_id")

    assert contextvars.copy_context().run(_inner) == "inner"
    assert store.get("request_id") == "outer"
    store.clear()
    assert store.get("request_id") is None
