"""Typed accessors over a raw key-value repository."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from iapsync.domain.ports.unit_of_work import ReadTransaction, WriteTransaction

log = getLogger(__name__)


class KeyValueStore:
    """Encodes scalar values for a single collection of the key-value table.

    Integers are stored as ASCII decimal so unsigned 64-bit values survive
    backends with signed integer columns; datetimes are stored as UTC ISO-8601.
    """

    def __init__(self, collection: str) -> None:
        self.collection = collection

    def get_bytes(self, key: str, tx: ReadTransaction) -> bytes | None:
        return tx.repositories.key_values.get(self.collection, key)

    def set_bytes(self, value: bytes, key: str, tx: WriteTransaction) -> None:
        tx.repositories.key_values.set(self.collection, key, value)

    def get_uint64(self, key: str, tx: ReadTransaction) -> int | None:
        raw = self.get_bytes(key, tx)
        if raw is None:
            return None
        try:
            return int(raw.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            log.error("Corrupt integer value for %s/%s", self.collection, key)
            return None

    def set_uint64(self, value: int, key: str, tx: WriteTransaction) -> None:
        if value < 0:
            raise ValueError(f"Expected an unsigned value for {key}, got {value}")
        self.set_bytes(str(value).encode("ascii"), key, tx)

    def get_string(self, key: str, tx: ReadTransaction) -> str | None:
        raw = self.get_bytes(key, tx)
        return raw.decode("utf-8") if raw is not None else None

    def set_string(self, value: str, key: str, tx: WriteTransaction) -> None:
        self.set_bytes(value.encode("utf-8"), key, tx)

    def get_datetime(self, key: str, tx: ReadTransaction) -> datetime | None:
        raw = self.get_string(key, tx)
        if raw is None:
            return None
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            log.error("Corrupt datetime value for %s/%s", self.collection, key)
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    def set_datetime(self, value: datetime, key: str, tx: WriteTransaction) -> None:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        self.set_string(value.astimezone(UTC).isoformat(), key, tx)

    def remove(self, key: str, tx: WriteTransaction) -> None:
        tx.repositories.key_values.remove(self.collection, key)
