# poemodel/storage.py
import datetime
import os
import sqlite3
from typing import Optional

import pytz

from .logger import get_logger

logger = get_logger(__name__)

CACHE_DB_PATH = os.getenv("CACHE_DB_PATH", "cache/procurement_cache.sqlite3")


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


def stash_key(league: str, index: int) -> str:
    return f"stash/{league}/{index}"


def inventory_key(character_name: str) -> str:
    return f"inventory/{character_name}"


CHARACTERS_KEY = "characters"


class CacheService:
    """
    Raw document and image cache for one account, stored in SQLite.
    Rows are keyed by the account identity so several accounts can share
    a database file.
    """

    def __init__(self, identity: str, db_path: Optional[str] = None):
        self.identity = identity
        self.db_path = db_path or CACHE_DB_PATH
        self.ensure_db()

    def _connect(self):
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def ensure_db(self):
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    identity TEXT,
                    doc_key TEXT,
                    body BLOB,
                    fetched_at TEXT,
                    PRIMARY KEY (identity, doc_key)
                )
            """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS images (
                    identity TEXT,
                    url TEXT,
                    body BLOB,
                    fetched_at TEXT,
                    PRIMARY KEY (identity, url)
                )
            """
            )
            con.commit()

    def get_document(self, key: str) -> Optional[bytes]:
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                "SELECT body FROM documents WHERE identity=? AND doc_key=?",
                (self.identity, key),
            )
            row = cur.fetchone()
        return bytes(row[0]) if row else None

    def put_document(self, key: str, body: bytes) -> None:
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                """
                INSERT INTO documents (identity, doc_key, body, fetched_at)
                VALUES (?,?,?,?)
                ON CONFLICT(identity, doc_key) DO UPDATE SET
                    body=excluded.body,
                    fetched_at=excluded.fetched_at
            """,
                (self.identity, key, sqlite3.Binary(body), now_utc_iso()),
            )
            con.commit()
        logger.debug("Cached document %s (%d bytes) for %s", key, len(body), self.identity)

    def get_fetched_at(self, key: str) -> Optional[str]:
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                "SELECT fetched_at FROM documents WHERE identity=? AND doc_key=?",
                (self.identity, key),
            )
            row = cur.fetchone()
        return row[0] if row else None

    def get_image(self, url: str) -> Optional[bytes]:
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                "SELECT body FROM images WHERE identity=? AND url=?",
                (self.identity, url),
            )
            row = cur.fetchone()
        return bytes(row[0]) if row else None

    def put_image(self, url: str, body: bytes) -> None:
        with self._connect() as con:
            cur = con.cursor()
            cur.execute(
                """
                INSERT INTO images (identity, url, body, fetched_at)
                VALUES (?,?,?,?)
                ON CONFLICT(identity, url) DO UPDATE SET
                    body=excluded.body,
                    fetched_at=excluded.fetched_at
            """,
                (self.identity, url, sqlite3.Binary(body), now_utc_iso()),
            )
            con.commit()

    def clear(self) -> None:
        """Drop every cached document and image for this identity."""
        with self._connect() as con:
            cur = con.cursor()
            cur.execute("DELETE FROM documents WHERE identity=?", (self.identity,))
            docs = cur.rowcount
            cur.execute("DELETE FROM images WHERE identity=?", (self.identity,))
            images = cur.rowcount
            con.commit()
        logger.info(
            "Cleared cache for %s (%d documents, %d images).",
            self.identity, docs, images,
        )
