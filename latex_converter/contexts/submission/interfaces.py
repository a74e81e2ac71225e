"""Gateways the conversion pipeline needs from the host publishing system."""

from pathlib import Path
from typing import List, Protocol

from latex_converter.contexts.submission.records import (
    NewSubmissionFile,
    Submission,
    SubmissionFileRecord,
)


class FileStorage(Protocol):
    @property
    def base_dir(self) -> Path:
        """Absolute base directory that record paths are relative to."""

    def store(self, source: Path, destination: str) -> int:
        """Add a file to the managed store at a relative destination.

        Returns the storage file id. Raises OSError if the file cannot be added.
        """


class SubmissionRepository(Protocol):
    def get(self, submission_id: int) -> Submission:
        ...

    def submission_dir(self, context_id: int, submission_id: int) -> str:
        """Relative directory for the files of a submission."""


class SubmissionFileRepository(Protocol):
    def get(self, submission_file_id: int) -> SubmissionFileRecord:
        """Raises RecordNotFoundError for unknown ids."""

    def create(self, fields: NewSubmissionFile) -> int:
        """Insert a record and return its new id. Raises PersistenceError."""

    def list_by_association(self, submission_id: int, assoc_id: int) -> List[SubmissionFileRecord]:
        """Submission files of a submission that depend on assoc_id."""


class Notifier(Protocol):
    def notify(self, user_id: int, level: int, message_key: str) -> None:
        ...
