"""
Submission Context

Responsibilities:
- Describes submissions and submission files as typed records
- Defines the gateways the conversion pipeline needs from the host
  (file storage, submission file repository, notifications)
- Ships local adapters for those gateways (SQLite, directory store, JSON Lines)

Owns: submission/file metadata, file storage, user notifications
Never: Compiles LaTeX
"""

from latex_converter.contexts.submission.exceptions import PersistenceError, RecordNotFoundError
from latex_converter.contexts.submission.interfaces import (
    FileStorage,
    Notifier,
    SubmissionFileRepository,
    SubmissionRepository,
)
from latex_converter.contexts.submission.records import (
    AssocType,
    FileStage,
    Genre,
    NewSubmissionFile,
    Submission,
    SubmissionFileRecord,
)

__all__ = [
    "AssocType",
    "FileStage",
    "FileStorage",
    "Genre",
    "NewSubmissionFile",
    "Notifier",
    "PersistenceError",
    "RecordNotFoundError",
    "Submission",
    "SubmissionFileRecord",
    "SubmissionFileRepository",
    "SubmissionRepository",
]
