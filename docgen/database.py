"""
SQLite persistence for business profiles and saved documents.

One database file (output/backoffice.db) holds:

  businesses   one profile per user: branding text used on rendered documents
  documents    quotations, invoices and delivery challans, each stored as the
               JSON payload it was created with plus denormalised columns for
               fast listing

Payloads are stored as received; numeric fields may be decimal text.  They
are validated into typed records (models.load_record) on the way out, which
is where decimal text is normalised to floats.
"""
import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from models import Business, BusinessRecord, DocumentKind, load_record

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS businesses (
    user_id       TEXT PRIMARY KEY,
    business_name TEXT NOT NULL,
    profile       TEXT NOT NULL,      -- Business serialised as JSON
    updated_at    TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS documents (
    id              TEXT PRIMARY KEY,
    user_id         TEXT NOT NULL,
    kind            TEXT NOT NULL,    -- quotation | invoice | challan
    document_number TEXT NOT NULL,
    customer_name   TEXT,
    status          TEXT,
    total           TEXT,             -- as stored by the caller, may be decimal text
    created_at      TEXT NOT NULL,
    payload         TEXT NOT NULL     -- full record as JSON
);

CREATE INDEX IF NOT EXISTS idx_documents_owner  ON documents (user_id, kind);
CREATE INDEX IF NOT EXISTS idx_documents_number ON documents (document_number);
"""


class Database:
    """Thin wrapper around an SQLite database file for back-office records."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Database schema ready: %s", self.db_path)

    # ------------------------------------------------------------------
    # Business profiles
    # ------------------------------------------------------------------

    def get_business(self, user_id: str) -> Optional[Business]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT profile FROM businesses WHERE user_id=?", (user_id,)
            ).fetchone()
        return Business.model_validate_json(row["profile"]) if row else None

    def get_or_create_business(self, user_id: str) -> Business:
        """Return the user's profile, creating the default one on first use."""
        business = self.get_business(user_id)
        if business is None:
            business = Business()
            self.save_business(user_id, business)
            logger.info("Created default business profile for user %s", user_id)
        return business

    def save_business(self, user_id: str, business: Business) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO businesses (user_id, business_name, profile, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    business_name = excluded.business_name,
                    profile       = excluded.profile,
                    updated_at    = excluded.updated_at
                """,
                (
                    user_id,
                    business.business_name,
                    business.model_dump_json(),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(self, user_id: str, kind: DocumentKind, payload: dict) -> str:
        """
        Store a document payload and return its new id.

        The payload is validated before it is written so that nothing
        unrenderable reaches the table.
        """
        record = load_record(kind, payload)
        doc_id = payload.get("id") or uuid.uuid4().hex
        stored = {**payload, "id": doc_id}

        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO documents (
                    id, user_id, kind, document_number, customer_name,
                    status, total, created_at, payload
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    doc_id,
                    user_id,
                    kind,
                    record.document_number,
                    record.customer_name,
                    record.status,
                    None if payload.get("total") is None else str(payload["total"]),
                    record.created_at.isoformat(),
                    json.dumps(stored, default=str),
                ),
            )

        logger.info("Stored %s %s (%s)", kind, record.document_number, doc_id)
        return doc_id

    def get_document(self, user_id: str, kind: DocumentKind, doc_id: str) -> Optional[BusinessRecord]:
        """Return the typed record, or None if it does not exist for this user."""
        with self._conn() as conn:
            row = conn.execute(
                "SELECT payload FROM documents WHERE id=? AND user_id=? AND kind=?",
                (doc_id, user_id, kind),
            ).fetchone()
        return load_record(kind, json.loads(row["payload"])) if row else None

    def list_documents(
        self,
        user_id: str,
        kind: DocumentKind,
        limit: int = 500,
        offset: int = 0,
    ) -> list[dict]:
        """Return document summaries (no payload blob) ordered newest-first."""
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT id, kind, document_number, customer_name, status, total, created_at
                FROM documents
                WHERE user_id = ? AND kind = ?
                ORDER BY created_at DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, kind, limit, offset),
            ).fetchall()
        return [dict(r) for r in rows]

    def delete_document(self, user_id: str, kind: DocumentKind, doc_id: str) -> bool:
        with self._conn() as conn:
            conn.execute(
                "DELETE FROM documents WHERE id=? AND user_id=? AND kind=?",
                (doc_id, user_id, kind),
            )
            return conn.execute("SELECT changes()").fetchone()[0] > 0
