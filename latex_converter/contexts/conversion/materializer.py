"""
Copies a submission's main file and its dependent files into the working directory.

The main file lands at the top of the working directory under its display
name. Dependent files keep their display name as a relative path, so a figure
named img/fig1.png ends up at <working_dir>/img/fig1.png where \\includegraphics
expects it.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable, List

from latex_converter.contexts.conversion.exceptions import MaterializationError
from latex_converter.contexts.conversion.logger import _log_debug
from latex_converter.contexts.submission.records import SubmissionFileRecord


@dataclass
class MaterializedFiles:
    """
    Files placed in the working directory.

    Attributes:
        main_file_name: Name of the main file inside the working directory
        dependent_names: Relative paths of the copied dependent files
    """

    main_file_name: str
    dependent_names: List[str] = field(default_factory=list)


def _display_name(record: SubmissionFileRecord) -> str:
    try:
        return record.display_name
    except KeyError:
        raise MaterializationError(
            f"Submission file {record.id} has no name for locale '{record.locale}'"
        ) from None


def _destination(working_dir: Path, relative_name: str) -> Path:
    relative = PurePosixPath(relative_name.replace("\\", "/"))
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise MaterializationError(f"File name escapes the working directory: '{relative_name}'")
    return working_dir.joinpath(*relative.parts)


def _copy(source: Path, destination: Path) -> None:
    if not source.is_file():
        raise MaterializationError("Submission file missing from storage", source)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
    except OSError as e:
        raise MaterializationError(f"Copy to {destination} failed ({e})", source) from e


def materialize(
    main: SubmissionFileRecord,
    dependents: Iterable[SubmissionFileRecord],
    files_dir: Path,
    working_dir: Path,
) -> MaterializedFiles:
    """
    Copy the main file and its dependents from storage into the working directory.

    Args:
        main: The LaTeX main submission file
        dependents: Submission files associated with the main file
        files_dir: Base files directory that record paths are relative to
        working_dir: Destination directory (must exist)

    Returns:
        MaterializedFiles naming what was placed

    Raises:
        MaterializationError: If a source is missing, a name is unusable, or a copy fails
    """
    main_file_name = PurePosixPath(_display_name(main).replace("\\", "/")).name
    _copy(files_dir / main.path, _destination(working_dir, main_file_name))
    _log_debug(f"Copied main file {main.path} -> {main_file_name}")

    dependent_names = []
    for record in dependents:
        name = _display_name(record)
        _copy(files_dir / record.path, _destination(working_dir, name))
        dependent_names.append(name)
        _log_debug(f"Copied dependent file {record.path} -> {name}")

    return MaterializedFiles(main_file_name=main_file_name, dependent_names=dependent_names)
