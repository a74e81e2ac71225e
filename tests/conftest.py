"""Shared fixtures: a local submission store and a stand-in LaTeX executable."""

import stat
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest
from loguru import logger

from latex_converter.contexts.submission.records import (
    AssocType,
    FileStage,
    Genre,
    NewSubmissionFile,
    SubmissionFileRecord,
)
from latex_converter.contexts.submission.repository import SubmissionDatabase
from latex_converter.contexts.submission.storage import LocalFileStorage

MINIMAL_TEX = r"""
\documentclass{article}
\begin{document}
Hello World
\end{document}
"""


class RecordingNotifier:
    """Notifier that keeps notifications in memory."""

    def __init__(self):
        self.notifications: List[tuple] = []

    def notify(self, user_id: int, level: int, message_key: str) -> None:
        self.notifications.append((user_id, level, message_key))


def write_fake_latex(
    directory: Path,
    produces: Sequence[str] = ("pdf", "log", "aux"),
    exit_code: int = 1,
    name: str = "fake-latex",
) -> Path:
    """
    Write a shell script that behaves like a LaTeX compiler.

    It records its arguments and working directory next to itself, then creates
    <stem>.<ext> in the current directory for every extension in `produces`.
    """
    script = directory / name
    lines = [
        "#!/bin/sh",
        f'echo "$@" > "{directory}/{name}.args"',
        f'pwd > "{directory}/{name}.cwd"',
        'for last in "$@"; do :; done',
        'stem="${last%.*}"',
    ]
    for extension in produces:
        lines.append(f'echo "fake {extension} output" > "$stem.{extension}"')
    lines.append(f"exit {exit_code}")

    script.write_text("\n".join(lines) + "\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


class SubmissionFixture:
    """Creates submissions and stored files in a temporary local store."""

    def __init__(self, database: SubmissionDatabase, storage: LocalFileStorage, upload_dir: Path):
        self.database = database
        self.storage = storage
        self.upload_dir = upload_dir
        self._counter = 0

    def add_submission(self, context_id: int = 1) -> int:
        return self.database.submissions.add(context_id)

    def add_file(
        self,
        submission_id: int,
        name: Dict[str, str],
        content: str = MINIMAL_TEX,
        locale: str = "en",
        depends_on: Optional[int] = None,
        genre_id: int = Genre.OTHER,
        file_stage: int = FileStage.SUBMISSION,
    ) -> SubmissionFileRecord:
        self._counter += 1
        upload = self.upload_dir / f"upload_{self._counter}"
        upload.write_text(content)

        destination = f"journals/1/articles/{submission_id}/stored_{self._counter}"
        file_id = self.storage.store(upload, destination)

        if depends_on is None:
            assoc_type, assoc_id = AssocType.SUBMISSION, submission_id
        else:
            assoc_type, assoc_id, file_stage = AssocType.SUBMISSION_FILE, depends_on, FileStage.DEPENDENT

        new_id = self.database.submission_files.create(
            NewSubmissionFile(
                submission_id=submission_id,
                file_id=file_id,
                path=destination,
                name=name,
                locale=locale,
                mimetype="text/x-tex",
                file_stage=file_stage,
                genre_id=genre_id,
                assoc_type=assoc_type,
                assoc_id=assoc_id,
            )
        )
        return self.database.submission_files.get(new_id)


@pytest.fixture
def database(tmp_path):
    db = SubmissionDatabase.initialize(tmp_path / "db" / "submissions.db")
    yield db
    db.close()


@pytest.fixture
def storage(database, tmp_path):
    return LocalFileStorage(database, tmp_path / "files")


@pytest.fixture
def submissions(database, storage, tmp_path):
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    return SubmissionFixture(database, storage, upload_dir)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def bin_dir(tmp_path):
    directory = tmp_path / "bin"
    directory.mkdir()
    return directory


@pytest.fixture
def temp_root(tmp_path):
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture
def fake_latex(bin_dir):
    """Factory for stand-in compilers: fake_latex(produces=("pdf",), exit_code=0) -> path."""

    def _make(produces: Sequence[str] = ("pdf", "log", "aux"), exit_code: int = 1, name: str = "fake-latex") -> Path:
        return write_fake_latex(bin_dir, produces=produces, exit_code=exit_code, name=name)

    return _make


@pytest.fixture
def log_messages():
    """Messages logged through loguru while the test runs."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)
