"""
LaTeX Invocation Module

Runs the configured LaTeX executable on the main file inside the working
directory. The exit status is recorded but never used to decide success:
compilers exit non-zero on recoverable errors while still writing a usable PDF,
so the output resolver looks at the files that were produced instead.
"""

import re
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from latex_converter.contexts.conversion.exceptions import InvocationError
from latex_converter.contexts.conversion.logger import _log_debug

LATEX_FLAGS = ["-no-shell-escape", "-interaction=nonstopmode"]


@dataclass
class InvocationResult:
    """
    What happened when the compiler ran.

    Attributes:
        returncode: Process exit status (diagnostic only)
        output: Combined stdout and stderr
        elapsed_s: Wall-clock time of the run
    """

    returncode: int
    output: str = ""
    elapsed_s: float = 0.0


def build_command(executable: str, main_file_name: str) -> List[str]:
    return [executable, *LATEX_FLAGS, main_file_name]


def invoke_latex(working_dir: Path, executable: str, main_file_name: str) -> InvocationResult:
    """
    Run the LaTeX executable on the main file.

    Blocks until the compiler exits. No timeout is applied.

    Args:
        working_dir: Directory holding the main file; used as the process cwd
        executable: Absolute path to the LaTeX executable
        main_file_name: Main file name relative to working_dir

    Returns:
        InvocationResult with exit status and captured output

    Raises:
        InvocationError: If the executable cannot be started
    """
    cmd = build_command(executable, main_file_name)
    _log_debug(f"Running: {' '.join(cmd)} (cwd={working_dir})")

    start_time = time.time()
    try:
        result = subprocess.run(
            cmd,
            cwd=working_dir,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
        )
    except OSError as e:
        raise InvocationError(f"Cannot run LaTeX executable {executable}: {e}") from e

    return InvocationResult(
        returncode=result.returncode,
        output=result.stdout or "",
        elapsed_s=time.time() - start_time,
    )


def parse_latex_log(log_content: str) -> tuple[List[str], List[str]]:
    """
    Parse LaTeX log file for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # -file-line-error style: "./main.tex:12: Undefined control sequence."
    file_line_pattern = re.compile(r"^[^\s:]+\.tex:\d+: (.+)$", re.MULTILINE)
    for match in file_line_pattern.finditer(log_content):
        message = match.group(1).strip()
        if message not in errors:
            errors.append(message)

    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        compiled = re.compile(pattern, re.MULTILINE)
        for match in compiled.finditer(log_content):
            warnings.append(match.group(1).strip())

    return errors, warnings


def read_log_diagnostics(log_path: Path) -> tuple[List[str], List[str]]:
    """Errors and warnings from a compiler log file, or two empty lists if there is none."""
    if not log_path.is_file():
        return [], []

    # pdflatex writes log files in latin-1 (font metadata is not UTF-8)
    return parse_latex_log(log_path.read_text(encoding="latin-1"))


def find_executable_problem(executable: Optional[str]) -> Optional[str]:
    """Describe why an executable setting cannot be used, or None if it looks runnable."""
    if not executable:
        return "not configured"

    path = Path(executable)
    if not path.is_absolute():
        return None  # resolved through PATH by the OS at run time
    if not path.exists():
        return f"{executable} does not exist"
    if not path.is_file():
        return f"{executable} is not a file"
    return None
