"""Ports for persisting subscription state."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueRepository(Protocol):
    """Raw byte storage grouped by collection.

    Typed encoding is layered on top by :class:`iapsync.domain.key_value.KeyValueStore`.
    """

    def get(self, collection: str, key: str) -> bytes | None: ...

    def set(self, collection: str, key: str, value: bytes) -> None: ...

    def remove(self, collection: str, key: str) -> None: ...
