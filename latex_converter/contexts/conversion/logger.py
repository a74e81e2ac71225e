"""
Conversion context logger.

Provides logging interface for the conversion context with automatic [convert] prefix.
All conversion modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import List, Optional

from loguru import logger

from latex_converter.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[convert]"


def setup_conversion_logger(log_dir: Path, latex_executable: Optional[str] = None, verbose: bool = False) -> Path:
    """
    Setup logger for conversion context.

    Args:
        log_dir: Directory for this conversion session
        latex_executable: Configured compiler, recorded in the provenance header
        verbose: Also show DEBUG messages on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="convert",
        log_dir=log_dir,
        extra_provenance={"LaTeX compiler": latex_executable or "(not configured)"},
        console_level="DEBUG" if verbose else "INFO",
    )


def _log_info(message: str) -> None:
    """Log info message with [convert] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [convert] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [convert] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [convert] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [convert] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_conversion_start(
    submission_file_id: int,
    main_file_name: str,
    dependent_names: List[str],
    working_dir: Path,
) -> None:
    """Log start of conversion with context."""
    _log_info(f"Starting conversion of submission file {submission_file_id}: {main_file_name}")
    if dependent_names:
        _log_info(f"With {len(dependent_names)} dependent files: {', '.join(dependent_names)}")
    _log_info(f"Converting in {working_dir}")


def log_invocation_result(
    main_file_name: str,
    result,  # InvocationResult
    errors: list,
    warnings: list,
    verbose: bool = False,
) -> None:
    """
    Log what the compiler did. Diagnostic only; success is decided from artifacts.

    Args:
        main_file_name: File passed to the compiler
        result: InvocationResult from invoke_latex()
        errors: LaTeX errors parsed from the log file
        warnings: LaTeX warnings parsed from the log file
        verbose: Show more errors/warnings
    """
    _log_info(f"{main_file_name}: compiler exited with {result.returncode} ({result.elapsed_s:.2f}s)")

    if errors:
        _log_warning(f"{len(errors)} LaTeX errors in log")
        error_limit = 10 if verbose else 5
        for i, err in enumerate(errors[:error_limit], 1):
            _log_warning(f"  Error {i}: {err}")
        if len(errors) > error_limit:
            _log_warning(f"  ... and {len(errors) - error_limit} more errors")

    if warnings:
        _log_debug(f"{len(warnings)} LaTeX warnings in log")
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")

    # raw=True keeps multi-line compiler output unformatted
    if result.output:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nLATEX OUTPUT:\n{'=' * 80}\n{result.output}\n"
        )
