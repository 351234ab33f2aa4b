# speechtxt/db/__init__.py
# =========================
# Persistence Layer (SQLite)

from speechtxt.db.repository import PersistenceError, TranscriptionRepository  # noqa: F401

__all__ = ["PersistenceError", "TranscriptionRepository"]
