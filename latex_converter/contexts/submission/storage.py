"""
Directory-backed file storage.

Files live under a base files directory at the relative path they were stored
with (e.g. journals/1/articles/51/648b2431.pdf). Each stored file is
registered in the `files` table of the submission database, which hands out
the file id.
"""

import os
import shutil
from pathlib import Path, PurePosixPath

from dotenv import load_dotenv

from latex_converter.contexts.submission.exceptions import PersistenceError
from latex_converter.contexts.submission.repository import SubmissionDatabase
from latex_converter.utils.timestamp import now_exact

load_dotenv()
FILES_DIR = Path(os.getenv("LATEX_CONVERTER_FILES_DIR", "files"))


class LocalFileStorage:
    def __init__(self, database: SubmissionDatabase, base_dir: Path = FILES_DIR):
        self.database = database
        self._base_dir = Path(base_dir).resolve()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path for a storage-relative path.

        Raises:
            ValueError: If the path is absolute or escapes the base directory
        """
        relative = PurePosixPath(relative_path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Storage path must stay inside {self._base_dir}: {relative_path}")
        return self._base_dir / relative

    def store(self, source: Path, destination: str) -> int:
        """
        Copy a file into the store and register it.

        Args:
            source: Absolute path of the file to add
            destination: Path relative to the base directory

        Returns:
            New file id

        Raises:
            FileNotFoundError: If source doesn't exist
            FileExistsError: If destination is already taken
            PersistenceError: If the file cannot be registered (the copy is removed)
        """
        source = Path(source)
        if not source.is_file():
            raise FileNotFoundError(f"File to store not found: {source}")

        target = self.resolve(destination)
        if target.exists():
            raise FileExistsError(f"Storage path already in use: {destination}")

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

        try:
            return self.database.insert(
                "INSERT INTO files (path, created_at) VALUES (?, ?)",
                (str(PurePosixPath(destination)), now_exact()),
            )
        except PersistenceError:
            # Every stored file has a files row
            target.unlink()
            raise
