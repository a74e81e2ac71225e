"""
Failure kinds of the conversion pipeline.

Every kind ends the run with the same generic user notification; the
distinction exists for the server-side log.
"""

from pathlib import Path
from typing import Optional

from latex_converter.contexts.submission.exceptions import PersistenceError as _RepositoryPersistenceError


class ConversionError(Exception):
    """Base class for failures that end a conversion run."""


class ConfigurationMissingError(ConversionError):
    """Raised when no LaTeX executable is configured for the context."""

    def __init__(self, context_id: int):
        self.context_id = context_id
        super().__init__(f"No LaTeX executable configured for context {context_id}")


class WorkspaceError(ConversionError, OSError):
    """Raised when the working directory cannot be created."""


class MaterializationError(ConversionError):
    """
    Raised when submission files cannot be copied into the working directory.

    Attributes:
        message: Error description
        source: Source file that failed, if known
    """

    def __init__(self, message: str, source: Optional[Path] = None):
        self.message = message
        self.source = source
        super().__init__(f"{message}: {source}" if source else message)


class InvocationError(ConversionError):
    """Raised when the LaTeX executable cannot be started at all."""


class NoOutputProducedError(ConversionError):
    """Raised when neither a PDF nor a log file exists after compilation."""

    def __init__(self, working_dir: Path, pdf_name: str, log_name: str):
        self.working_dir = working_dir
        self.pdf_name = pdf_name
        self.log_name = log_name
        super().__init__(f"Neither {pdf_name} nor {log_name} was produced in {working_dir}")


class PersistenceError(ConversionError, _RepositoryPersistenceError):
    """Raised when the converted main file could not be added to the submission."""
