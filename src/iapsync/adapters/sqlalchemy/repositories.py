"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update

from iapsync.adapters.sqlalchemy.mappings import key_value_table

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyKeyValueRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, collection: str, key: str) -> bytes | None:
        stmt = (
            select(key_value_table.c.value)
            .where(key_value_table.c.collection == collection)
            .where(key_value_table.c.key == key)
        )
        value = self.session.execute(stmt).scalar_one_or_none()
        return bytes(value) if value is not None else None

    def set(self, collection: str, key: str, value: bytes) -> None:
        stmt = (
            update(key_value_table)
            .where(key_value_table.c.collection == collection)
            .where(key_value_table.c.key == key)
            .values(value=value)
        )
        if self.session.execute(stmt).rowcount == 0:
            self.session.execute(
                insert(key_value_table).values(collection=collection, key=key, value=value)
            )

    def remove(self, collection: str, key: str) -> None:
        self.session.execute(
            delete(key_value_table)
            .where(key_value_table.c.collection == collection)
            .where(key_value_table.c.key == key)
        )
