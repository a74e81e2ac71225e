"""
SQLite-backed submission and submission file repositories.

Local stand-in for the host's metadata store. One database file holds the
submissions, the submission file records and the storage file registry used by
LocalFileStorage. Display names are stored as JSON objects keyed by locale.
"""

import json
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from latex_converter.contexts.submission.exceptions import PersistenceError, RecordNotFoundError
from latex_converter.contexts.submission.records import (
    AssocType,
    NewSubmissionFile,
    Submission,
    SubmissionFileRecord,
)
from latex_converter.utils.timestamp import now_exact

load_dotenv()
DATABASE_PATH = Path(os.getenv("LATEX_CONVERTER_DB", "files/submissions.db"))

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS submissions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        context_id INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        path TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS submission_files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        submission_id INTEGER NOT NULL REFERENCES submissions(id),
        file_id INTEGER NOT NULL,
        path TEXT NOT NULL,
        name TEXT NOT NULL,
        locale TEXT NOT NULL,
        mimetype TEXT NOT NULL,
        file_stage INTEGER NOT NULL,
        genre_id INTEGER NOT NULL,
        assoc_type INTEGER,
        assoc_id INTEGER,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_submission_files_assoc "
    "ON submission_files(submission_id, assoc_type, assoc_id)",
)


class SubmissionDatabase:
    """
    SQLite database holding submissions, submission files and stored files.

    To create a new database (or upgrade an existing file with missing tables),
    use SubmissionDatabase.initialize(). Instantiating directly requires the
    database file to exist.
    """

    def __init__(self, db_path: Path = DATABASE_PATH):
        """
        Load an existing database from disk.

        Args:
            db_path: Path to existing SQLite database file

        Raises:
            FileNotFoundError: If database file doesn't exist
        """
        self.db_path = Path(db_path)

        if not self.db_path.exists():
            raise FileNotFoundError(
                f"Database not found: {self.db_path}\n"
                f"To create a new database, use SubmissionDatabase.initialize()"
            )

        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row

    @classmethod
    def initialize(cls, db_path: Path = DATABASE_PATH) -> "SubmissionDatabase":
        """Create the schema if needed and return the opened database. Existing rows are kept."""
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(db_path))
        for statement in SCHEMA:
            conn.execute(statement)
        conn.commit()
        conn.close()

        return cls(db_path)

    def query(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """
        Execute SQL query and return results as list of dicts.

        Raises:
            PersistenceError: If the query fails (locked database, missing table, ...)
        """
        try:
            cursor = self.conn.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise PersistenceError(f"Query failed: {' '.join(sql.split())[:60]}", e) from e

    def insert(self, sql: str, params: tuple = ()) -> int:
        """
        Execute a single INSERT in its own transaction and return the new row id.

        Raises:
            PersistenceError: If the insert fails
        """
        try:
            with self.conn:
                cursor = self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise PersistenceError(f"Insert failed: {sql.split('(')[0].strip()}", e) from e
        return cursor.lastrowid

    def close(self) -> None:
        self.conn.close()

    @property
    def submissions(self) -> "SqliteSubmissionRepository":
        return SqliteSubmissionRepository(self)

    @property
    def submission_files(self) -> "SqliteSubmissionFileRepository":
        return SqliteSubmissionFileRepository(self)


class SqliteSubmissionRepository:
    """Submissions, read by the conversion pipeline to find the owning context."""

    def __init__(self, database: SubmissionDatabase):
        self.database = database

    def get(self, submission_id: int) -> Submission:
        rows = self.database.query(
            "SELECT id, context_id FROM submissions WHERE id = ?", (submission_id,)
        )
        if not rows:
            raise RecordNotFoundError("Submission", submission_id)
        return Submission(id=rows[0]["id"], context_id=rows[0]["context_id"])

    def add(self, context_id: int) -> int:
        """Create a submission in a context and return its id."""
        return self.database.insert(
            "INSERT INTO submissions (context_id) VALUES (?)", (context_id,)
        )

    def submission_dir(self, context_id: int, submission_id: int) -> str:
        return f"journals/{context_id}/articles/{submission_id}"


class SqliteSubmissionFileRepository:
    """Submission file records. Create and read only."""

    def __init__(self, database: SubmissionDatabase):
        self.database = database

    def get(self, submission_file_id: int) -> SubmissionFileRecord:
        rows = self.database.query(
            "SELECT * FROM submission_files WHERE id = ?", (submission_file_id,)
        )
        if not rows:
            raise RecordNotFoundError("Submission file", submission_file_id)
        return _row_to_record(rows[0])

    def create(self, fields: NewSubmissionFile) -> int:
        return self.database.insert(
            """
            INSERT INTO submission_files (
                submission_id, file_id, path, name, locale, mimetype,
                file_stage, genre_id, assoc_type, assoc_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                fields.submission_id,
                fields.file_id,
                fields.path,
                json.dumps(fields.name, ensure_ascii=False),
                fields.locale,
                fields.mimetype,
                int(fields.file_stage),
                int(fields.genre_id),
                None if fields.assoc_type is None else int(fields.assoc_type),
                fields.assoc_id,
                now_exact(),
            ),
        )

    def list_by_association(self, submission_id: int, assoc_id: int) -> List[SubmissionFileRecord]:
        rows = self.database.query(
            """
            SELECT * FROM submission_files
            WHERE submission_id = ? AND assoc_type = ? AND assoc_id = ?
            ORDER BY id
            """,
            (submission_id, int(AssocType.SUBMISSION_FILE), assoc_id),
        )
        return [_row_to_record(row) for row in rows]

    def list_by_submission(self, submission_id: int) -> List[SubmissionFileRecord]:
        """All submission files of a submission, oldest first."""
        rows = self.database.query(
            "SELECT * FROM submission_files WHERE submission_id = ? ORDER BY id",
            (submission_id,),
        )
        return [_row_to_record(row) for row in rows]


def _row_to_record(row: Dict[str, Any]) -> SubmissionFileRecord:
    return SubmissionFileRecord(
        id=row["id"],
        submission_id=row["submission_id"],
        file_id=row["file_id"],
        path=row["path"],
        name=json.loads(row["name"]),
        locale=row["locale"],
        mimetype=row["mimetype"],
        file_stage=row["file_stage"],
        genre_id=row["genre_id"],
        assoc_type=row["assoc_type"],
        assoc_id=row["assoc_id"],
    )
