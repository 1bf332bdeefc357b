"""Storage module for the content ingestion pipeline.

One SQLite file holds three tables:

1. **companies**
   - The company directory: name (unique), per-platform profile links,
     and an active flag. Companies are deactivated, never deleted, so
     records scraped under their name stay attributable.

2. **ingestion_records**
   - One row per scraped post, with the NormalizedPost stored as JSON.
   - UNIQUE(post_id) and UNIQUE(url) are the dedup backstop. Two runs
     racing to insert the same post end with one row; the loser gets
     DuplicateRecordError.

3. **seen_posts**
   - Dedup keys of records removed by cleanup. `exists()` and `insert()`
     check it too, so a purged post is never ingested a second time.

The connection is shared between the scheduler thread and manual
triggers, so every statement runs under the database lock.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from content_ingest.errors import DuplicateRecordError
from content_ingest.models import Company, IngestionRecord, NormalizedPost, Platform, utcnow

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS companies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    medium_link TEXT,
    mirror_link TEXT,
    paragraph_link TEXT,
    active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS ingestion_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_name TEXT NOT NULL,
    platform TEXT NOT NULL,
    post_id TEXT NOT NULL UNIQUE,
    url TEXT NOT NULL UNIQUE,
    post_json TEXT NOT NULL,
    processed INTEGER NOT NULL DEFAULT 0,
    fetched_at TEXT NOT NULL,
    processed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_records_company_platform ON ingestion_records (company_name, platform);
CREATE INDEX IF NOT EXISTS idx_records_processed ON ingestion_records (processed);
CREATE INDEX IF NOT EXISTS idx_records_fetched_at ON ingestion_records (fetched_at);

CREATE TABLE IF NOT EXISTS seen_posts (
    post_id TEXT NOT NULL PRIMARY KEY,
    url TEXT NOT NULL UNIQUE,
    purged_at TEXT NOT NULL
);
"""


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()


def get_connection(db_path: str, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a SQLite connection usable from the scheduler thread.

    - WAL journal for fewer writer blocks
    - NORMAL synchronous for performance
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    return conn


class Database:
    """Owns the connection and lock; exposes the two stores.

    Use as a context manager so the connection is always closed:

        with Database("data/content.db") as db:
            db.companies.list_active()
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn = get_connection(db_path)
        self.lock = threading.RLock()
        with self.lock:
            self.conn.executescript(SCHEMA)
            self.conn.commit()
        self.companies = CompanyDirectory(self)
        self.records = ContentStore(self)

    def close(self) -> None:
        with self.lock:
            self.conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ── Company Directory ──────────────────────────────────────────────────────


class CompanyDirectory:
    def __init__(self, db: Database):
        self.db = db

    def add(self, company: Company) -> Company:
        """Insert a company, or update links/active flag if the name exists."""
        now = _iso(utcnow())
        with self.db.lock:
            self.db.conn.execute(
                """
                INSERT INTO companies (name, medium_link, mirror_link, paragraph_link, active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    medium_link = excluded.medium_link,
                    mirror_link = excluded.mirror_link,
                    paragraph_link = excluded.paragraph_link,
                    active = excluded.active,
                    updated_at = excluded.updated_at
                """,
                (
                    company.name.strip(),
                    company.medium_link,
                    company.mirror_link,
                    company.paragraph_link,
                    int(company.active),
                    now,
                    now,
                ),
            )
            self.db.conn.commit()
        logger.info("Added %s to monitoring list", company.name)
        return company

    def deactivate(self, name: str) -> bool:
        """Soft-delete: stop ingesting for `name` but keep its history."""
        with self.db.lock:
            cur = self.db.conn.execute(
                "UPDATE companies SET active = 0, updated_at = ? WHERE name = ?",
                (_iso(utcnow()), name),
            )
            self.db.conn.commit()
        if cur.rowcount:
            logger.info("Removed company %s from monitoring list", name)
            return True
        return False

    def find_by_name(self, name: str) -> Optional[Company]:
        with self.db.lock:
            row = self.db.conn.execute(
                "SELECT * FROM companies WHERE name = ?", (name,)
            ).fetchone()
        return self._to_company(row) if row else None

    def list_active(self) -> list[Company]:
        """Active companies in insertion order."""
        with self.db.lock:
            rows = self.db.conn.execute(
                "SELECT * FROM companies WHERE active = 1 ORDER BY id"
            ).fetchall()
        return [self._to_company(r) for r in rows]

    def list_all(self) -> list[Company]:
        with self.db.lock:
            rows = self.db.conn.execute("SELECT * FROM companies ORDER BY id").fetchall()
        return [self._to_company(r) for r in rows]

    @staticmethod
    def _to_company(row: sqlite3.Row) -> Company:
        return Company(
            name=row["name"],
            medium_link=row["medium_link"],
            mirror_link=row["mirror_link"],
            paragraph_link=row["paragraph_link"],
            active=bool(row["active"]),
        )


# ── Content Store ──────────────────────────────────────────────────────────


class ContentStore:
    def __init__(self, db: Database):
        self.db = db

    def exists(self, post_id: str, url: str) -> bool:
        """True if a record with this post_id OR this url is already stored."""
        with self.db.lock:
            row = self.db.conn.execute(
                "SELECT 1 FROM ingestion_records WHERE post_id = ? OR url = ? LIMIT 1",
                (post_id, url),
            ).fetchone()
            if row is None:
                row = self._seen(post_id, url)
        return row is not None

    def _seen(self, post_id: str, url: str) -> Optional[sqlite3.Row]:
        return self.db.conn.execute(
            "SELECT 1 FROM seen_posts WHERE post_id = ? OR url = ? LIMIT 1",
            (post_id, url),
        ).fetchone()

    def insert(self, record: IngestionRecord) -> IngestionRecord:
        """Persist a new record and return it with its id set.

        Raises DuplicateRecordError if the post_id or url is taken.
        """
        post = record.post
        with self.db.lock:
            if self._seen(post.post_id, post.url) is not None:
                raise DuplicateRecordError(post.post_id, post.url)
            try:
                cur = self.db.conn.execute(
                    """
                    INSERT INTO ingestion_records
                        (company_name, platform, post_id, url, post_json, processed, fetched_at, processed_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.company_name,
                        record.platform.value,
                        post.post_id,
                        post.url,
                        json.dumps(post.to_dict(), ensure_ascii=False),
                        int(record.processed),
                        _iso(record.fetched_at),
                        _iso(record.processed_at) if record.processed_at else None,
                    ),
                )
                self.db.conn.commit()
            except sqlite3.IntegrityError as exc:
                self.db.conn.rollback()
                raise DuplicateRecordError(post.post_id, post.url) from exc
        record.id = int(cur.lastrowid)
        return record

    def mark_processed(self, record_id: int) -> bool:
        with self.db.lock:
            cur = self.db.conn.execute(
                "UPDATE ingestion_records SET processed = 1, processed_at = ? WHERE id = ?",
                (_iso(utcnow()), record_id),
            )
            self.db.conn.commit()
        return cur.rowcount > 0

    def mark_processed_bulk(self, record_ids: Iterable[int]) -> int:
        """Mark several records processed; returns how many rows matched."""
        ids = list(record_ids)
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        with self.db.lock:
            cur = self.db.conn.execute(
                f"UPDATE ingestion_records SET processed = 1, processed_at = ? WHERE id IN ({placeholders})",
                (_iso(utcnow()), *ids),
            )
            self.db.conn.commit()
        logger.info("Marked %d records as processed", cur.rowcount)
        return cur.rowcount

    def list_records(
        self,
        company_name: Optional[str] = None,
        platform: Optional[Platform] = None,
        processed: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> list[IngestionRecord]:
        """Stored records, newest first, optionally filtered."""
        clauses: list[str] = []
        params: list = []
        if company_name is not None:
            clauses.append("company_name = ?")
            params.append(company_name)
        if platform is not None:
            clauses.append("platform = ?")
            params.append(Platform(platform).value)
        if processed is not None:
            clauses.append("processed = ?")
            params.append(int(processed))

        sql = "SELECT * FROM ingestion_records"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY fetched_at DESC, id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self.db.lock:
            rows = self.db.conn.execute(sql, params).fetchall()
        return [self._to_record(r) for r in rows]

    def count(self) -> int:
        with self.db.lock:
            return self.db.conn.execute("SELECT COUNT(*) FROM ingestion_records").fetchone()[0]

    def purge_processed(self, older_than: datetime) -> int:
        """Delete processed records fetched before `older_than`.

        Their post_id and url move to seen_posts in the same transaction,
        so the posts still count as existing for later runs.
        """
        cutoff = _iso(older_than)
        with self.db.lock:
            try:
                self.db.conn.execute(
                    """
                    INSERT OR IGNORE INTO seen_posts (post_id, url, purged_at)
                    SELECT post_id, url, ? FROM ingestion_records
                    WHERE processed = 1 AND fetched_at < ?
                    """,
                    (_iso(utcnow()), cutoff),
                )
                cur = self.db.conn.execute(
                    "DELETE FROM ingestion_records WHERE processed = 1 AND fetched_at < ?",
                    (cutoff,),
                )
                self.db.conn.commit()
            except sqlite3.Error:
                self.db.conn.rollback()
                raise
        return cur.rowcount

    @staticmethod
    def _to_record(row: sqlite3.Row) -> IngestionRecord:
        return IngestionRecord(
            id=row["id"],
            company_name=row["company_name"],
            platform=Platform(row["platform"]),
            post=NormalizedPost.from_dict(json.loads(row["post_json"])),
            processed=bool(row["processed"]),
            fetched_at=datetime.fromisoformat(row["fetched_at"]),
            processed_at=datetime.fromisoformat(row["processed_at"]) if row["processed_at"] else None,
        )
