"""
Adds conversion output to the submission as new submission files.

The chosen artifact (PDF or log) becomes a new file in the original's place
(same stage, association, genre and locale); every other artifact becomes a
dependent file of that new file. Existing records are never modified.
"""

import mimetypes
import uuid
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from latex_converter.contexts.conversion.logger import _log_debug, _log_error, _log_info, _log_warning
from latex_converter.contexts.submission.exceptions import PersistenceError
from latex_converter.contexts.submission.interfaces import FileStorage, SubmissionFileRepository
from latex_converter.contexts.submission.records import (
    AssocType,
    FileStage,
    Genre,
    NewSubmissionFile,
    SubmissionFileRecord,
)

EXTENSIONS = {
    "tex": ["tex"],
    "pdf": ["pdf"],
    "log": ["log"],
    "text": ["txt"],
    "image": ["gif", "jpg", "jpeg", "png", "jpe"],
    "html": ["htm", "html"],
    "style": ["css"],
}

MIMETYPES = {
    "tex": "text/x-tex",
    "pdf": "application/pdf",
    "log": "text/plain",
    "txt": "text/plain",
}

DEFAULT_GENRE_IDS = {
    "image": int(Genre.IMAGE),
    "style": int(Genre.STYLE),
    "other": int(Genre.OTHER),
}


def _extension(file_name: str) -> str:
    return PurePosixPath(file_name).suffix.lstrip(".").lower()


def mimetype_for(file_name: str) -> str:
    """MIME type of a produced file, falling back to application/octet-stream."""
    extension = _extension(file_name)
    if extension in MIMETYPES:
        return MIMETYPES[extension]
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or "application/octet-stream"


def infer_genre(file_name: str, genre_ids: Optional[Mapping[str, int]] = None) -> int:
    """Genre id for a dependent file: image, style sheet, or other."""
    ids = {**DEFAULT_GENRE_IDS, **(genre_ids or {})}
    extension = _extension(file_name)

    if extension in EXTENSIONS["image"]:
        return ids["image"]
    if extension in EXTENSIONS["style"]:
        return ids["style"]
    return ids["other"]


def converted_display_names(original_names: Mapping[str, str], extension: str) -> Dict[str, str]:
    """Each locale's original name with its extension swapped, e.g. paper.tex -> paper.pdf."""
    return {
        locale: f"{PurePosixPath(name).stem}.{extension}"
        for locale, name in original_names.items()
    }


class SubmissionFileWriter:
    """
    Persists conversion artifacts as submission files.

    Args:
        original: The LaTeX main file that was converted
        submission_dir: Storage directory for the submission's files
        storage: File storage gateway
        repository: Submission file repository gateway
        genre_ids: Genre id overrides ({"image": .., "style": .., "other": ..})
    """

    def __init__(
        self,
        original: SubmissionFileRecord,
        submission_dir: str,
        storage: FileStorage,
        repository: SubmissionFileRepository,
        genre_ids: Optional[Mapping[str, int]] = None,
    ):
        self.original = original
        self.submission_dir = submission_dir
        self.storage = storage
        self.repository = repository
        self.genre_ids = dict(genre_ids or {})

    def _store(self, artifact: Path) -> tuple[int, str]:
        """Copy an artifact into storage under a fresh unique name."""
        extension = _extension(artifact.name)
        stored_name = uuid.uuid4().hex + (f".{extension}" if extension else "")
        destination = f"{self.submission_dir}/{stored_name}"
        return self.storage.store(artifact, destination), destination

    def _add(
        self,
        artifact: Path,
        make_fields: Callable[[int, str], NewSubmissionFile],
        failure: str,
    ) -> Optional[int]:
        """Store an artifact and create its record; log and return None on failure."""
        try:
            file_id, path = self._store(artifact)
        except (PersistenceError, OSError, ValueError) as e:
            _log_error(f"{failure}: {e}")
            return None

        try:
            return self.repository.create(make_fields(file_id, path))
        except PersistenceError as e:
            _log_error(f"{failure}: {e}")
            _log_warning(f"Stored file {file_id} at {path} is not referenced by any submission file")
            return None

    def write_main(self, artifact: Path) -> Optional[int]:
        """
        Add the chosen artifact as the new main submission file.

        Returns:
            New submission file id, or None if storing or inserting failed
        """
        extension = _extension(artifact.name)

        def fields(file_id: int, path: str) -> NewSubmissionFile:
            return NewSubmissionFile(
                submission_id=self.original.submission_id,
                file_id=file_id,
                path=path,
                name=converted_display_names(self.original.name, extension),
                locale=self.original.locale,
                mimetype=mimetype_for(artifact.name),
                file_stage=self.original.file_stage,
                genre_id=self.original.genre_id,
                assoc_type=self.original.assoc_type,
                assoc_id=self.original.assoc_id,
            )

        new_id = self._add(artifact, fields, f"Could not add {artifact.name} as main file")
        if new_id is not None:
            _log_info(f"Added {artifact.name} as submission file {new_id}")
        return new_id

    def write_dependents(self, artifacts: Iterable[Path], main_submission_file_id: int) -> List[int]:
        """
        Add each artifact as a dependent file of the new main file.

        A failing artifact is logged and skipped; the others are still written.

        Returns:
            Ids of the dependent files that were created
        """
        created = []
        for artifact in artifacts:

            def fields(file_id: int, path: str) -> NewSubmissionFile:
                return NewSubmissionFile(
                    submission_id=self.original.submission_id,
                    file_id=file_id,
                    path=path,
                    name={locale: artifact.name for locale in self.original.name},
                    locale=self.original.locale,
                    mimetype=mimetype_for(artifact.name),
                    file_stage=FileStage.DEPENDENT,
                    genre_id=infer_genre(artifact.name, self.genre_ids),
                    assoc_type=AssocType.SUBMISSION_FILE,
                    assoc_id=main_submission_file_id,
                )

            new_id = self._add(artifact, fields, f"Skipping dependent file {artifact.name}")
            if new_id is None:
                continue

            _log_debug(f"Added {artifact.name} as dependent file {new_id}")
            created.append(new_id)

        return created
