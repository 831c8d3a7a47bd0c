import sqlite3
from pathlib import Path
from typing import Iterable

from src.docsync.domain.models import CollectionMapping


class SQLiteCollectionMappingRepository:
    """Routes a staged collection subdirectory to sink knowledge collections."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.init_schema()

    def init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS collection_mappings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_collection TEXT UNIQUE NOT NULL,
                knowledge_collections TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        self.conn.commit()

    def create_mapping(self, source_collection: str, knowledge_collection_ids: Iterable[str]) -> CollectionMapping:
        name = (source_collection or "").strip()
        ids = _clean_ids(knowledge_collection_ids)
        if not name:
            raise ValueError("source_collection must not be empty")
        if not ids:
            raise ValueError("at least one knowledge collection id is required")

        cursor = self.conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO collection_mappings (source_collection, knowledge_collections) VALUES (?, ?)",
                (name, ",".join(ids)),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

        cursor.execute(
            """
            SELECT id, source_collection, knowledge_collections, created_at, updated_at
            FROM collection_mappings WHERE id = ?
            """,
            (cursor.lastrowid,),
        )
        return _row_to_mapping(cursor.fetchone())

    def list_mappings(self) -> list[CollectionMapping]:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, source_collection, knowledge_collections, created_at, updated_at
            FROM collection_mappings ORDER BY id
            """
        )
        return [_row_to_mapping(row) for row in cursor.fetchall()]

    def get_collection_mappings(self) -> dict[str, list[str]]:
        return {
            mapping.source_collection: list(mapping.knowledge_collection_ids)
            for mapping in self.list_mappings()
        }

    def delete_mapping(self, source_collection: str) -> bool:
        cursor = self.conn.cursor()
        cursor.execute(
            "DELETE FROM collection_mappings WHERE source_collection = ?",
            (source_collection.strip(),),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def close(self) -> None:
        self.conn.close()


def _clean_ids(ids: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for raw in ids:
        for part in str(raw).split(","):
            part = part.strip()
            if part and part not in cleaned:
                cleaned.append(part)
    return cleaned


def _row_to_mapping(row: tuple) -> CollectionMapping:
    return CollectionMapping(
        id=int(row[0]),
        source_collection=str(row[1]),
        knowledge_collection_ids=tuple(_clean_ids([row[2]])),
        created_at=str(row[3]),
        updated_at=str(row[4]),
    )
