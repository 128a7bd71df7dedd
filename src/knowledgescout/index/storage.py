"""SQLite persistence for documents, chunks and index stats."""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence

from knowledgescout.errors import StorageError
from knowledgescout.models import ChunkRecord, Document, IndexStats


class ChunkStore(Protocol):
    """What the chunk index needs from persistence."""

    def iter_documents(self) -> List[Document]: ...

    def replace_chunks(self, document_id: str, chunks: Sequence[ChunkRecord]) -> None: ...

    def load_chunks(self) -> List[ChunkRecord]: ...

    def count_chunks(self) -> int: ...

    def save_stats(self, stats: IndexStats) -> None: ...

    def load_stats(self) -> IndexStats: ...


class SQLiteChunkStore:
    """Persistence layer for documents and their term-vector chunks.

    A single connection is shared between threads; every statement runs under
    the store lock, so a transaction in progress is never visible to readers.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to open database {self.db_path}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        try:
            # The file is only read here; a non-database file fails on the first pragma
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._ensure_schema()
        except (sqlite3.Error, StorageError) as exc:
            self._conn.close()
            raise StorageError(f"Unable to open database {self.db_path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        """The raw connection. Statements run on it bypass the store lock."""
        return self._conn

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise StorageError(str(exc)) from exc
            except Exception:
                self._conn.rollback()
                raise

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    title TEXT,
                    content TEXT NOT NULL,
                    pages INTEGER NOT NULL DEFAULT 1,
                    sha256 TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TRIGGER IF NOT EXISTS documents_updated
                AFTER UPDATE OF content, pages, title ON documents
                BEGIN
                    UPDATE documents SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
                END;
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS chunks (
                    id INTEGER PRIMARY KEY,
                    document_id TEXT NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    page_number INTEGER NOT NULL,
                    text TEXT NOT NULL,
                    vector TEXT NOT NULL,
                    FOREIGN KEY(document_id) REFERENCES documents(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_chunks_document_id
                    ON chunks(document_id)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS index_stats (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    total_documents INTEGER NOT NULL DEFAULT 0,
                    total_chunks INTEGER NOT NULL DEFAULT 0,
                    last_rebuild TEXT
                )
                """
            )

    # Documents

    def add_document(self, document: Document) -> None:
        """Insert a document, or overwrite the stored text of an existing id."""
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO documents(id, title, content, pages, sha256)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    content = excluded.content,
                    pages = excluded.pages,
                    sha256 = excluded.sha256
                """,
                (document.id, document.title, document.text, document.pages, document.sha256),
            )

    def get_document(self, document_id: str) -> Optional[Document]:
        with self._reading() as conn:
            row = conn.execute(
                "SELECT * FROM documents WHERE id = ?", (document_id,)
            ).fetchone()
        return _row_to_document(row) if row else None

    def find_by_sha256(self, sha256: str) -> Optional[Document]:
        with self._reading() as conn:
            row = conn.execute(
                "SELECT * FROM documents WHERE sha256 = ? LIMIT 1", (sha256,)
            ).fetchone()
        return _row_to_document(row) if row else None

    def iter_documents(self) -> List[Document]:
        with self._reading() as conn:
            rows = conn.execute("SELECT * FROM documents ORDER BY rowid").fetchall()
        return [_row_to_document(row) for row in rows]

    def list_documents(self, *, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
        """Document summaries, newest first."""
        with self._reading() as conn:
            rows = conn.execute(
                """
                SELECT
                    d.id AS id,
                    d.title AS title,
                    d.pages AS pages,
                    LENGTH(d.content) AS size,
                    d.created_at AS created_at,
                    COUNT(c.id) AS chunk_count
                FROM documents d
                LEFT JOIN chunks c ON c.document_id = d.id
                GROUP BY d.id
                ORDER BY d.created_at DESC, d.rowid DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            ).fetchall()
        return [dict(row) for row in rows]

    def count_documents(self) -> int:
        with self._reading() as conn:
            return conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    # Chunks

    def delete_chunks(self, document_id: str) -> None:
        # Note: This should be called within a transaction
        self._conn.execute("DELETE FROM chunks WHERE document_id = ?", (document_id,))

    def insert_chunks(self, document_id: str, chunks: Sequence[ChunkRecord]) -> None:
        # Note: This should be called within a transaction
        for chunk in chunks:
            self._conn.execute(
                """
                INSERT INTO chunks(document_id, chunk_index, page_number, text, vector)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    document_id,
                    chunk.index,
                    chunk.page,
                    chunk.text,
                    json.dumps(chunk.vector, ensure_ascii=True),
                ),
            )

    def replace_chunks(self, document_id: str, chunks: Sequence[ChunkRecord]) -> None:
        """Swap a document's chunk set in one transaction."""
        with self.transaction():
            self.delete_chunks(document_id)
            self.insert_chunks(document_id, chunks)

    def load_chunks(self) -> List[ChunkRecord]:
        """All chunks in storage order."""
        with self._reading() as conn:
            rows = conn.execute("SELECT * FROM chunks ORDER BY id").fetchall()
        return [_row_to_chunk(row) for row in rows]

    def chunks_for(self, document_id: str) -> List[ChunkRecord]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM chunks WHERE document_id = ? ORDER BY chunk_index",
                (document_id,),
            ).fetchall()
        return [_row_to_chunk(row) for row in rows]

    def count_chunks(self) -> int:
        with self._reading() as conn:
            return conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0]

    # Stats

    def save_stats(self, stats: IndexStats) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO index_stats(id, total_documents, total_chunks, last_rebuild)
                VALUES (1, ?, ?, ?)
                """,
                (
                    stats.total_documents,
                    stats.total_chunks,
                    stats.last_rebuild.isoformat() if stats.last_rebuild else None,
                ),
            )

    def load_stats(self) -> IndexStats:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM index_stats WHERE id = 1").fetchone()
        if row is None:
            return IndexStats()
        last_rebuild = row["last_rebuild"]
        return IndexStats(
            total_documents=row["total_documents"],
            total_chunks=row["total_chunks"],
            last_rebuild=datetime.fromisoformat(last_rebuild) if last_rebuild else None,
        )


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        title=row["title"] or "",
        text=row["content"],
        pages=row["pages"],
        sha256=row["sha256"] or "",
    )


def _row_to_chunk(row: sqlite3.Row) -> ChunkRecord:
    return ChunkRecord(
        document_id=row["document_id"],
        index=row["chunk_index"],
        page=row["page_number"],
        text=row["text"],
        vector=json.loads(row["vector"]) if row["vector"] else {},
    )
