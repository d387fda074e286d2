"""
SQLite implementation of the verification repository.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..constants import ConfigDefaults
from ..core.models import Claim, ClaimType, Evidence, Verdict
from .interfaces import VerificationRepositoryInterface

SCHEMA = """
CREATE TABLE IF NOT EXISTS claims (
    id TEXT PRIMARY KEY,
    raw_input TEXT NOT NULL,
    canon_text TEXT NOT NULL,
    language TEXT NOT NULL,
    claim_signature TEXT UNIQUE NOT NULL,
    extraction_confidence REAL,
    claim_type TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS evidence (
    id TEXT PRIMARY KEY,
    claim_id TEXT NOT NULL REFERENCES claims(id) ON DELETE CASCADE,
    source_url TEXT,
    publisher TEXT,
    published_at TEXT,
    snippet TEXT,
    evidence_type TEXT CHECK (evidence_type IN ('claimreview', 'news', 'kb')),
    stance TEXT CHECK (stance IN ('supports', 'refutes', 'neutral')),
    confidence REAL CHECK (confidence >= 0 AND confidence <= 100),
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS claim_verdicts (
    claim_id TEXT PRIMARY KEY REFERENCES claims(id) ON DELETE CASCADE,
    verdict TEXT CHECK (verdict IN ('true', 'false', 'misleading', 'satire', 'out_of_context', 'unverified')),
    confidence REAL CHECK (confidence >= 0 AND confidence <= 100),
    rationale TEXT,
    freshness_date TEXT,
    payload TEXT NOT NULL,
    decided_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS claim_analysis_metadata (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    claim_id TEXT NOT NULL REFERENCES claims(id) ON DELETE CASCADE,
    methodology TEXT,
    limitations TEXT,
    confidence_factors TEXT,
    search_queries TEXT,
    processing_stats TEXT,
    uncertainty_analysis TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_evidence_claim ON evidence(claim_id);
"""


class SQLiteRepositoryBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str = ":memory:", connection_factory=None):
        """Initialize with a database path or an explicit connection factory."""
        self.db_path = db_path
        self._shared_connection: Optional[sqlite3.Connection] = None
        self._connection_factory = connection_factory or self._default_connection_factory

    def _default_connection_factory(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self):
        """Get database connection context manager."""
        # An in-memory database only lives as long as its connection
        if self.db_path == ":memory:":
            if self._shared_connection is None:
                self._shared_connection = self._connection_factory()
            yield self._shared_connection
            return

        conn = self._connection_factory()
        try:
            yield conn
        finally:
            conn.close()

    def close(self):
        if self._shared_connection is not None:
            self._shared_connection.close()
            self._shared_connection = None

    def _row_to_dict(self, row) -> Dict[str, Any]:
        """Convert SQLite Row to dictionary."""
        if hasattr(row, 'keys'):
            return dict(row)
        return row


class SQLiteVerificationRepository(SQLiteRepositoryBase, VerificationRepositoryInterface):
    """SQLite implementation of VerificationRepositoryInterface."""

    def __init__(self, db_path: str = ":memory:", connection_factory=None,
                 evidence_limit: int = ConfigDefaults.STORED_EVIDENCE_LIMIT):
        super().__init__(db_path, connection_factory)
        self.evidence_limit = evidence_limit
        self._create_schema()

    def _create_schema(self):
        with self.get_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def _claim_from_row(self, row) -> Claim:
        data = self._row_to_dict(row)
        return Claim(
            id=data['id'],
            raw_text=data['raw_input'],
            canonical_text=data['canon_text'],
            language=data['language'],
            claim_signature=data['claim_signature'],
            extraction_confidence=data['extraction_confidence'] if data['extraction_confidence'] is not None else 1.0,
            claim_type=ClaimType(data['claim_type'] or ClaimType.FACTUAL.value),
        )

    def save_claim(self, claim: Claim) -> bool:
        """Store a claim; a claim with the same signature is kept as is."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR IGNORE INTO claims
                (id, raw_input, canon_text, language, claim_signature, extraction_confidence, claim_type, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                claim.id, claim.raw_text, claim.canonical_text, claim.language,
                claim.claim_signature, claim.extraction_confidence, claim.claim_type.value,
                datetime.now().isoformat()
            ))
            conn.commit()
            return cursor.rowcount > 0

    def get_claim_by_id(self, claim_id: str) -> Optional[Claim]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM claims WHERE id = ?", (claim_id,))
            row = cursor.fetchone()
            return self._claim_from_row(row) if row else None

    def get_claim_by_signature(self, signature: str) -> Optional[Claim]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM claims WHERE claim_signature = ?", (signature,))
            row = cursor.fetchone()
            return self._claim_from_row(row) if row else None

    def save_evidence(self, claim_id: str, evidence: List[Evidence]) -> int:
        """Store up to ``evidence_limit`` evidence items for a claim."""
        written = 0
        with self.get_connection() as conn:
            cursor = conn.cursor()
            for item in evidence[:self.evidence_limit]:
                cursor.execute("""
                    INSERT OR REPLACE INTO evidence
                    (id, claim_id, source_url, publisher, published_at, snippet, evidence_type,
                     stance, confidence, payload, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    item.id, claim_id, item.source_url, item.publisher.name,
                    item.published_at.isoformat() if item.published_at else None,
                    item.snippet, item.evidence_type.value, item.stance.value, item.confidence,
                    json.dumps(item.to_dict()), datetime.now().isoformat()
                ))
                written += 1
            conn.commit()
        return written

    def get_evidence(self, claim_id: str) -> List[Evidence]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT payload FROM evidence WHERE claim_id = ?
                ORDER BY created_at, rowid
            """, (claim_id,))
            return [Evidence.from_dict(json.loads(row['payload'])) for row in cursor.fetchall()]

    def save_verdict(self, claim_id: str, verdict: Verdict) -> bool:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR REPLACE INTO claim_verdicts
                (claim_id, verdict, confidence, rationale, freshness_date, payload, decided_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                claim_id, verdict.verdict.value, verdict.confidence,
                ' | '.join(verdict.rationale), verdict.freshness_date.isoformat(),
                json.dumps(verdict.to_dict()), datetime.now().isoformat()
            ))
            conn.commit()
            return cursor.rowcount > 0

    def get_verdict(self, claim_id: str) -> Optional[Verdict]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT payload FROM claim_verdicts WHERE claim_id = ?", (claim_id,))
            row = cursor.fetchone()
            return Verdict.from_dict(json.loads(row['payload'])) if row else None

    def save_analysis_metadata(self, claim_id: str, metadata: Dict[str, Any]) -> bool:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO claim_analysis_metadata
                (claim_id, methodology, limitations, confidence_factors, search_queries,
                 processing_stats, uncertainty_analysis, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                claim_id,
                json.dumps(metadata.get('methodology', [])),
                json.dumps(metadata.get('limitations', [])),
                json.dumps(metadata.get('confidence_factors', {})),
                json.dumps(metadata.get('search_queries', [])),
                json.dumps(metadata.get('processing_stats', {})),
                json.dumps(metadata.get('uncertainty_analysis', {})),
                datetime.now().isoformat()
            ))
            conn.commit()
            return cursor.rowcount > 0

    def get_analysis_metadata(self, claim_id: str) -> Optional[Dict[str, Any]]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM claim_analysis_metadata WHERE claim_id = ?
                ORDER BY id DESC LIMIT 1
            """, (claim_id,))
            row = cursor.fetchone()
            if not row:
                return None
            data = self._row_to_dict(row)
            for key in ('methodology', 'limitations', 'confidence_factors', 'search_queries',
                        'processing_stats', 'uncertainty_analysis'):
                data[key] = json.loads(data[key]) if data[key] else None
            return data

    def lookup_by_signature(self, signature: str) -> Optional[Tuple[Claim, Verdict]]:
        claim = self.get_claim_by_signature(signature)
        if claim is None:
            return None
        verdict = self.get_verdict(claim.id)
        if verdict is None:
            return None
        return claim, verdict
