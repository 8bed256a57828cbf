"""
Module: storage.store

Purpose:
    Durable local persistence of Question records in a single SQLite file.
    Primary keyspace ``questions`` keyed by record id, plus two secondary
    indexes maintained by the store on every write:
      - year (non-unique; "Unknown" kept distinct from numeric years)
      - keyword membership (multi-valued; one row per keyword per record)

Key Classes:
    - QuestionStore: open / get_all / get / put / bulk_put / delete / clear

Dependencies:
    - sqlite3 (std)
    - threading (std)
    - qbank_toolkit.core.utils.serialization: payload encoding

Used By:
    - library.service.QuestionLibrary
    - tagging.auto_tag.run_auto_tag

Schema versioning:
    ``PRAGMA user_version`` holds the on-disk schema version. Opening a
    fresh file creates the keyspace and indexes; an older version has its
    indexes recreated and rebuilt from stored payloads (no data loss); a
    newer version is refused with InitializationError.

The store performs no retries. Every failure surfaces as one of the typed
errors in ``storage.errors``.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Iterable, Iterator, List, Optional, Sequence

from qbank_toolkit.core.models.metadata import Year
from qbank_toolkit.core.models.questions import Question
from qbank_toolkit.core.schemas.validator import QUESTION_SCHEMA_VERSION, ValidationError
from qbank_toolkit.core.utils.serialization import dumps_question, loads_question

from .errors import InitializationError, ReadError, TransactionError, WriteError

logger = logging.getLogger(__name__)


SCHEMA_VERSION = QUESTION_SCHEMA_VERSION

_CREATE_KEYSPACE = """
CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY NOT NULL,
    created_at INTEGER NOT NULL,
    year TEXT NOT NULL,
    payload TEXT NOT NULL
)
"""

_CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_questions_year ON questions (year)",
    """
    CREATE TABLE IF NOT EXISTS question_keywords (
        keyword TEXT NOT NULL,
        question_id TEXT NOT NULL,
        PRIMARY KEY (keyword, question_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_question_keywords_keyword ON question_keywords (keyword)",
    "CREATE INDEX IF NOT EXISTS idx_question_keywords_question ON question_keywords (question_id)",
)

_UPSERT = """
INSERT INTO questions (id, created_at, year, payload) VALUES (?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    created_at = excluded.created_at,
    year = excluded.year,
    payload = excluded.payload
"""


def _year_key(year: Year) -> str:
    """Index key for a year: decimal digits, or the "Unknown" sentinel as-is."""
    return str(year)


class QuestionStore:
    """
    Embedded key-value store for questions with secondary indexes.

    One connection is shared for the lifetime of the store and guarded by a
    re-entrant lock, so a GUI thread and worker threads can use the same
    instance. Operations called before ``open()`` open the store first.

    Example:
        >>> with QuestionStore(Path("qbank.sqlite3")) as store:
        ...     store.put(question)
        ...     store.get_all()
        [Question('q1', Paper 1, year=2020, ...)]
    """

    def __init__(self, db_path: Path, *, timeout_s: float = 5.0) -> None:
        """
        Initialize store (does not touch disk).

        Args:
            db_path: Path of the SQLite database file
            timeout_s: How long the engine waits on a locked database
        """
        self.db_path = Path(db_path)
        self.timeout_s = timeout_s
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = RLock()

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def open(self) -> QuestionStore:
        """
        Ensure the store exists at the current schema version.

        Idempotent: calling it on an open store does nothing.

        Returns:
            self, for chaining

        Raises:
            InitializationError: If the database cannot be opened, is
                corrupt, or was written by a newer schema version
        """
        with self._lock:
            if self._conn is not None:
                return self

            conn: Optional[sqlite3.Connection] = None
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(
                    str(self.db_path),
                    timeout=self.timeout_s,
                    isolation_level=None,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                version = conn.execute("PRAGMA user_version").fetchone()[0]
                if version > SCHEMA_VERSION:
                    raise InitializationError(
                        f"{self.db_path} has schema version {version}, "
                        f"newer than supported version {SCHEMA_VERSION}"
                    )
                if version < SCHEMA_VERSION:
                    self._upgrade(conn, version)
            except InitializationError:
                if conn is not None:
                    conn.close()
                logger.error(f"Refusing to open {self.db_path}: newer schema")
                raise
            except (sqlite3.Error, OSError, ValidationError, ValueError) as e:
                if conn is not None:
                    conn.close()
                logger.error(f"Failed to open question store at {self.db_path}: {e}")
                raise InitializationError(f"Cannot open question store: {e}") from e

            self._conn = conn
            logger.info(f"Opened question store at {self.db_path} (schema v{SCHEMA_VERSION})")
            return self

    def close(self) -> None:
        """Close the underlying connection. The store can be reopened."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug(f"Closed question store at {self.db_path}")

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def __enter__(self) -> QuestionStore:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _upgrade(self, conn: sqlite3.Connection, from_version: int) -> None:
        """
        Create (fresh file) or rebuild (older file) keyspace and indexes.

        Records are never dropped: on upgrade the keyword index is
        repopulated from the stored payloads.
        """
        with self._transaction(conn):
            conn.execute(_CREATE_KEYSPACE)
            if from_version > 0:
                conn.execute("DROP INDEX IF EXISTS idx_questions_year")
                conn.execute("DROP TABLE IF EXISTS question_keywords")
            for statement in _CREATE_INDEXES:
                conn.execute(statement)
            if from_version > 0:
                rebuilt = 0
                for row in conn.execute("SELECT id, payload FROM questions").fetchall():
                    question = loads_question(row["payload"])
                    self._write_keywords(conn, question)
                    rebuilt += 1
                logger.info(
                    f"Upgraded question store v{from_version} -> v{SCHEMA_VERSION}, "
                    f"reindexed {rebuilt} records"
                )
            conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.open()
        assert self._conn is not None
        return self._conn

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
        """
        Explicit write transaction: commit on success, rollback on any error.
        """
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        try:
            conn.execute("COMMIT")
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

    def _write_record(self, conn: sqlite3.Connection, question: Question) -> None:
        """Upsert one record and replace its keyword index rows."""
        if not isinstance(question, Question):
            raise TypeError(f"Expected Question, got {type(question).__name__}")
        conn.execute(
            _UPSERT,
            (question.id, question.created_at, _year_key(question.year), dumps_question(question)),
        )
        conn.execute("DELETE FROM question_keywords WHERE question_id = ?", (question.id,))
        self._write_keywords(conn, question)

    @staticmethod
    def _write_keywords(conn: sqlite3.Connection, question: Question) -> None:
        conn.executemany(
            "INSERT OR IGNORE INTO question_keywords (keyword, question_id) VALUES (?, ?)",
            [(keyword, question.id) for keyword in question.keywords],
        )

    def _fetch(self, sql: str, params: Sequence = ()) -> List[Question]:
        """Run a SELECT returning payload rows and decode them."""
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(sql, params).fetchall()
                return [loads_question(row["payload"]) for row in rows]
            except (sqlite3.Error, ValidationError, ValueError) as e:
                logger.error(f"Read from question store failed: {e}")
                raise ReadError(f"Failed to read questions: {e}") from e

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    def get_all(self) -> List[Question]:
        """
        Return every stored record.

        No ordering is guaranteed; newest-first presentation is the
        caller's job.

        Raises:
            ReadError: On engine failure or an undecodable record
        """
        questions = self._fetch("SELECT payload FROM questions")
        logger.debug(f"Loaded {len(questions)} questions from store")
        return questions

    def get(self, question_id: str) -> Optional[Question]:
        """Point lookup by primary key. Returns None if absent."""
        found = self._fetch("SELECT payload FROM questions WHERE id = ?", (question_id,))
        return found[0] if found else None

    def find_by_year(self, year: Year) -> List[Question]:
        """Records whose year equals ``year`` (via the year index)."""
        return self._fetch(
            "SELECT payload FROM questions WHERE year = ?", (_year_key(year),)
        )

    def find_by_keyword(self, keyword: str) -> List[Question]:
        """Records tagged with ``keyword`` (via the keyword membership index)."""
        return self._fetch(
            "SELECT q.payload FROM question_keywords k "
            "JOIN questions q ON q.id = k.question_id "
            "WHERE k.keyword = ?",
            (keyword,),
        )

    def keywords(self) -> List[str]:
        """Distinct keywords across all records, sorted."""
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(
                    "SELECT DISTINCT keyword FROM question_keywords ORDER BY keyword"
                ).fetchall()
            except sqlite3.Error as e:
                raise ReadError(f"Failed to read keyword index: {e}") from e
        return [row["keyword"] for row in rows]

    def count(self) -> int:
        """Number of stored records."""
        with self._lock:
            conn = self._connection()
            try:
                return conn.execute("SELECT COUNT(*) FROM questions").fetchone()[0]
            except sqlite3.Error as e:
                raise ReadError(f"Failed to count questions: {e}") from e

    # ─────────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────────

    def put(self, question: Question) -> None:
        """
        Upsert exactly one record, overwriting any record with the same id.

        The stored record is replaced whole; fields are never merged.

        Raises:
            WriteError: If the record is rejected by the engine
        """
        with self._lock:
            conn = self._connection()
            try:
                with self._transaction(conn):
                    self._write_record(conn, question)
            except (sqlite3.Error, TypeError, ValueError) as e:
                logger.error(f"Failed to save question {getattr(question, 'id', None)!r}: {e}")
                raise WriteError(f"Failed to save question: {e}") from e
        logger.debug(f"Saved question {question.id}")

    def bulk_put(self, questions: Iterable[Question]) -> None:
        """
        Upsert many records in a single transaction.

        Either every record is written or none is: a failure on any record
        rolls the whole batch back and leaves the store as it was.

        Raises:
            TransactionError: If the batch aborted
        """
        batch = list(questions)
        if not batch:
            return
        with self._lock:
            conn = self._connection()
            try:
                with self._transaction(conn):
                    for question in batch:
                        self._write_record(conn, question)
            except (sqlite3.Error, TypeError, ValueError) as e:
                logger.error(f"Bulk save of {len(batch)} questions rolled back: {e}")
                raise TransactionError(
                    f"Bulk save of {len(batch)} questions aborted: {e}"
                ) from e
        logger.info(f"Saved {len(batch)} questions in one transaction")

    def delete(self, question_id: str) -> None:
        """
        Remove one record by id. Deleting a missing id succeeds silently.

        Raises:
            WriteError: If the engine rejects the delete
        """
        with self._lock:
            conn = self._connection()
            try:
                with self._transaction(conn):
                    conn.execute(
                        "DELETE FROM question_keywords WHERE question_id = ?", (question_id,)
                    )
                    cursor = conn.execute("DELETE FROM questions WHERE id = ?", (question_id,))
            except sqlite3.Error as e:
                logger.error(f"Failed to delete question {question_id!r}: {e}")
                raise WriteError(f"Failed to delete question: {e}") from e
        if cursor.rowcount:
            logger.debug(f"Deleted question {question_id}")
        else:
            logger.debug(f"Delete of missing question {question_id} ignored")

    def clear(self) -> None:
        """
        Remove every record. Irreversible.

        Confirming destructive intent is the caller's responsibility.

        Raises:
            WriteError: If the engine rejects the clear
        """
        with self._lock:
            conn = self._connection()
            try:
                with self._transaction(conn):
                    conn.execute("DELETE FROM question_keywords")
                    cursor = conn.execute("DELETE FROM questions")
            except sqlite3.Error as e:
                logger.error(f"Failed to clear question store: {e}")
                raise WriteError(f"Failed to clear question store: {e}") from e
        logger.warning(f"Cleared question store ({cursor.rowcount} records removed)")
