"""
Submission and submission file records.

Records are immutable snapshots of host metadata. The conversion pipeline reads
existing records and creates new ones through NewSubmissionFile; it never
updates a record in place.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import PurePosixPath
from typing import Dict


class FileStage(IntEnum):
    """Workflow stage a submission file belongs to."""

    SUBMISSION = 2
    NOTE = 3
    REVIEW_FILE = 4
    REVIEW_ATTACHMENT = 5
    FINAL = 6
    COPYEDIT = 9
    PROOF = 10
    PRODUCTION_READY = 11
    ATTACHMENT = 13
    REVIEW_REVISION = 15
    DEPENDENT = 17


class AssocType(IntEnum):
    """What a submission file is associated with."""

    SUBMISSION_FILE = 0x0000203
    SUBMISSION = 0x0100009


class Genre(IntEnum):
    """Default genre ids for files produced by the converter."""

    IMAGE = 10
    STYLE = 11
    OTHER = 12


@dataclass(frozen=True)
class Submission:
    id: int
    context_id: int


@dataclass(frozen=True)
class NewSubmissionFile:
    """
    Field set for creating a submission file record.

    Attributes:
        submission_id: Owning submission
        file_id: Id returned by the file storage for the stored content
        path: Storage path relative to the base files directory
        name: Locale-keyed display names, e.g. {"en": "paper.pdf"}
        locale: Locale whose display name is the file's on-disk name
        mimetype: MIME type of the stored content
        file_stage: Workflow stage (FileStage value)
        genre_id: Genre lookup id
        assoc_type: AssocType value, or None for files attached to the submission itself
        assoc_id: Id of the associated object (the main file for dependents)
    """

    submission_id: int
    file_id: int
    path: str
    name: Dict[str, str] = field(default_factory=dict)
    locale: str = "en"
    mimetype: str = "application/octet-stream"
    file_stage: int = FileStage.SUBMISSION
    genre_id: int = Genre.OTHER
    assoc_type: int = AssocType.SUBMISSION
    assoc_id: int = 0


@dataclass(frozen=True)
class SubmissionFileRecord(NewSubmissionFile):
    id: int = 0

    @property
    def display_name(self) -> str:
        """Display name in the record's own locale. Raises KeyError if missing."""
        return self.name[self.locale]

    @property
    def extension(self) -> str:
        """Lowercase extension of the display name, without the dot."""
        return PurePosixPath(self.display_name).suffix.lstrip(".").lower()
