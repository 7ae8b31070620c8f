"""SQLite-backed document store.

Documents live in the ``documents`` table as JSON objects. Timestamps are
encoded as ``{"__timestamp__": "<iso>"}`` and decoded back on read.
"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from store.base import Document, DocumentStore, StoreError, Timestamp
from logger import get_logger

logger = get_logger()

_TIMESTAMP_KEY = "__timestamp__"


def _encode_default(value: Any):
    if isinstance(value, Timestamp):
        return {_TIMESTAMP_KEY: value.isoformat()}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def _decode_hook(obj: Dict[str, Any]):
    if len(obj) == 1 and _TIMESTAMP_KEY in obj:
        return Timestamp.from_isoformat(obj[_TIMESTAMP_KEY])
    return obj


def encode_document(data: Dict[str, Any]) -> str:
    """Serialize document fields to JSON."""
    return json.dumps(data, default=_encode_default, sort_keys=True)


def decode_document(raw: str) -> Dict[str, Any]:
    """Deserialize JSON document fields."""
    return json.loads(raw, object_hook=_decode_hook)


class SqliteDocumentStore(DocumentStore):
    """Document store on top of the application's SQLite database.

    Args:
        db_manager: Database manager instance for database operations.
    """

    def __init__(self, db_manager):
        super().__init__()
        self.db_manager = db_manager

    @contextmanager
    def _connection(self):
        try:
            with self.db_manager.connect() as conn:
                yield conn
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
                (collection, doc_id, encode_document(data)),
            )
            conn.commit()

        logger.debug(f"Added document {collection}/{doc_id}")
        self._notify(collection)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            row = cursor.fetchone()

        if row:
            return Document(id=row[0], data=decode_document(row[1]))
        return None

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            row = cursor.fetchone()
            if row is None:
                logger.debug(f"Update of missing document {collection}/{doc_id}")
                return False

            data = decode_document(row[0])
            data.update(fields)
            conn.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                (encode_document(data), collection, doc_id),
            )
            conn.commit()

        self._notify(collection)
        return True

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            self._notify(collection)
        return deleted

    def documents(self, collection: str) -> List[Document]:
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? ORDER BY id",
                (collection,),
            )
            rows = cursor.fetchall()

        return [Document(id=row[0], data=decode_document(row[1])) for row in rows]
