from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional, Protocol


class SessionStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemorySessionStore:
    """Process-wide key/value slots; lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class ContextSessionStore:
    """
    Slots scoped to the current context (request handler, asyncio task).

    Each logical session sees its own values; writes never leak into sibling
    contexts. Call clear() at the end of a request the way request ids are
    cleared in middleware.
    """

    def __init__(self, name: str = "gateway_session"):
        self._var: ContextVar[Optional[Dict[str, Any]]] = ContextVar(name, default=None)

    def get(self, key: str) -> Any:
        return (self._var.get() or {}).get(key)

    def set(self, key: str, value: Any) -> None:
        data = dict(self._var.get() or {})
        data[key] = value
        self._var.set(data)

    def clear(self) -> None:
        self._var.set(None)


default_session_store = InMemorySessionStore()
