"""SQLite-backed store for finished transcriptions."""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List

from speechtxt.schemas import TranscriptionRecord

logger = logging.getLogger("speechtxt.db.repository")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS speechtotext (
    id TEXT PRIMARY KEY,
    audio_url TEXT NOT NULL,
    text TEXT NOT NULL,
    file_name TEXT NOT NULL,
    created_by_email TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_INDEX = """
CREATE INDEX IF NOT EXISTS idx_speechtotext_email
    ON speechtotext (created_by_email)
"""


class PersistenceError(Exception):
    """Raised when the database cannot be read or written."""
    pass


class TranscriptionRepository:
    """
    Each call opens its own connection, so one repository can serve
    concurrent requests from different threads.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"failed to open database {self._db_path}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(_SCHEMA)
                conn.execute(_INDEX)
        except sqlite3.Error as exc:
            raise PersistenceError("failed to create speechtotext table") from exc
        finally:
            conn.close()
        logger.info("Speechtotext table ready at %s", self._db_path)

    def create(
        self,
        *,
        audio_url: str,
        text: str,
        file_name: str,
        created_by_email: str,
    ) -> TranscriptionRecord:
        now = datetime.now(timezone.utc)
        record = TranscriptionRecord(
            id=uuid.uuid4().hex,
            audio_url=audio_url,
            text=text,
            file_name=file_name,
            created_by_email=created_by_email,
            created_at=now,
            updated_at=now,
        )

        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO speechtotext
                        (id, audio_url, text, file_name, created_by_email, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.id,
                        record.audio_url,
                        record.text,
                        record.file_name,
                        record.created_by_email,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError("failed to insert transcription") from exc
        finally:
            conn.close()
        return record

    def find_by_email(self, email: str) -> List[TranscriptionRecord]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT id, audio_url, text, file_name, created_by_email, created_at, updated_at
                FROM speechtotext
                WHERE created_by_email = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (email,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError("failed to query transcriptions") from exc
        finally:
            conn.close()

        return [
            TranscriptionRecord(
                id=row["id"],
                audio_url=row["audio_url"],
                text=row["text"],
                file_name=row["file_name"],
                created_by_email=row["created_by_email"],
                created_at=datetime.fromisoformat(row["created_at"]),
                updated_at=datetime.fromisoformat(row["updated_at"]),
            )
            for row in rows
        ]


__all__ = ["TranscriptionRepository", "PersistenceError"]
