"""
Loguru setup shared by all contexts.

One log directory per run: a DEBUG-level file sink for the server-side record
and a console sink for whoever started the run. Context wrappers live in
contexts/{context}/logger.py and add their own prefix.
"""

import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

import latex_converter

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, object]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Point loguru at <log_dir>/<context_name>.log and stdout, then write a provenance header.

    Args:
        context_name: Context identifier, used as the log file name (e.g. "convert")
        log_dir: Directory for this run; created if missing
        extra_provenance: Extra header lines (e.g. {"LaTeX compiler": "/usr/bin/pdflatex"})
        console_level: Minimum level shown on stdout; the file always gets DEBUG

    Returns:
        Path to the log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: Optional[Dict[str, object]] = None) -> None:
    """Header with the command line, package version and any extra context."""
    header = {
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "Python": sys.version.split()[0],
        "latex_converter": latex_converter.__version__,
        **(extra_context or {}),
    }

    logger.info("=" * 80)
    for key, value in header.items():
        logger.info(f"{key}: {value}")
    logger.info("=" * 80)
