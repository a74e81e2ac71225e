"""Decides which produced file becomes the new main file, and which become dependents."""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List

from latex_converter.contexts.conversion.exceptions import NoOutputProducedError

PDF_EXTENSION = "pdf"
LOG_EXTENSION = "log"


@dataclass
class ResolvedOutput:
    """
    Result of output resolution.

    Attributes:
        main_artifact: The PDF, or the compiler log when no PDF was produced
        dependent_artifacts: Other <stem>* files produced alongside it
        is_fallback: True when the log stands in for a missing PDF
    """

    main_artifact: Path
    dependent_artifacts: List[Path] = field(default_factory=list)
    is_fallback: bool = False


def expected_names(main_file_name: str) -> tuple[str, str, str]:
    """(stem, pdf name, log name) for a main file name such as "paper.tex"."""
    stem = PurePosixPath(main_file_name).stem
    return stem, f"{stem}.{PDF_EXTENSION}", f"{stem}.{LOG_EXTENSION}"


def collect_dependent_artifacts(working_dir: Path, stem: str, excluded: set) -> List[Path]:
    """Regular files directly in working_dir whose name starts with stem, minus excluded names."""
    return sorted(
        (
            path
            for path in working_dir.iterdir()
            if path.is_file() and path.name.startswith(stem) and path.name not in excluded
        ),
        key=lambda path: path.name,
    )


def resolve_output(
    working_dir: Path,
    stem: str,
    pdf_name: str,
    log_name: str,
    main_file_name: str,
) -> ResolvedOutput:
    """
    Pick the main artifact and collect dependent artifacts after compilation.

    A PDF wins. Without one, the log file is returned so the user gets the
    compiler's diagnostics instead of nothing.

    Raises:
        NoOutputProducedError: If neither the PDF nor the log exists
    """
    pdf_path = working_dir / pdf_name
    log_path = working_dir / log_name

    if pdf_path.is_file():
        main_artifact, is_fallback = pdf_path, False
    elif log_path.is_file():
        main_artifact, is_fallback = log_path, True
    else:
        raise NoOutputProducedError(working_dir, pdf_name, log_name)

    dependents = collect_dependent_artifacts(
        working_dir, stem, excluded={main_file_name, main_artifact.name}
    )
    return ResolvedOutput(
        main_artifact=main_artifact, dependent_artifacts=dependents, is_fallback=is_fallback
    )
