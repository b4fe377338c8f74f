from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from studypal.errors import StorageUnavailable
from studypal.extensions import db
from studypal.models import StorageEntry

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SQLStore(KeyValueStore):
    """Durable store backed by the ``storage_entry`` table.

    Every write commits immediately, mirroring the synchronous
    write-after-mutation behaviour of the stores built on top of it.

    Args:
        namespace: Scope of the keys, normally ``User.storage_namespace``.
    """

    def __init__(self, namespace: str):
        self.namespace = namespace

    def _entry(self, key: str) -> StorageEntry | None:
        return StorageEntry.query.filter_by(namespace=self.namespace, key=key).first()

    def _read_raw(self, key: str) -> str | None:
        try:
            entry = self._entry(key)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable(str(e)) from e
        return entry.value if entry else None

    def _write_raw(self, key: str, text: str) -> None:
        try:
            entry = self._entry(key)
            if entry:
                entry.value = text
            else:
                db.session.add(StorageEntry(namespace=self.namespace, key=key, value=text))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable(str(e)) from e

    def remove(self, key: str) -> None:
        try:
            StorageEntry.query.filter_by(namespace=self.namespace, key=key).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable(str(e)) from e

    def clear(self) -> None:
        try:
            count = StorageEntry.query.filter_by(namespace=self.namespace).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable(str(e)) from e
        logger.info(f"Cleared {count} stored key(s) for {self.namespace}")

    def keys(self) -> list[str]:
        try:
            rows = (
                db.session.query(StorageEntry.key)
                .filter_by(namespace=self.namespace)
                .order_by(StorageEntry.key)
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning(f"Storage unavailable listing keys: {e}")
            return []
        return [r[0] for r in rows]
