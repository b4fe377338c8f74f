from datetime import datetime

from studypal.extensions import db


class StorageEntry(db.Model):
    """One JSON-encoded value of the key/value store, scoped by namespace."""

    __tablename__ = 'storage_entry'
    __table_args__ = (
        db.UniqueConstraint('namespace', 'key', name='uq_storage_entry_namespace_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(64), nullable=False, index=True)
    key = db.Column(db.String(100), nullable=False)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f'<StorageEntry {self.namespace}/{self.key}>'
