"""
Per-run working directory.

Each conversion gets its own directory under the system temp root, named
<prefix>_<YYYYMMDD_HHMMSS>_<random hex>. The directory is removed when the
`with` block exits, whatever happened inside it.

Example:
    with WorkingDirectory.create() as workspace:
        shutil.copy2(source, workspace.path / "main.tex")
    # workspace.path no longer exists here
"""

import secrets
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from latex_converter.contexts.conversion.exceptions import WorkspaceError
from latex_converter.contexts.conversion.logger import _log_debug
from latex_converter.utils.timestamp import now

PLUGIN_NAME = "latexConverter"


class WorkingDirectory:
    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def create(cls, prefix: str = PLUGIN_NAME, root: Optional[Path] = None) -> "WorkingDirectory":
        """
        Create a fresh, uniquely named working directory.

        Args:
            prefix: First part of the directory name
            root: Parent directory (default: system temp directory)

        Returns:
            WorkingDirectory handle

        Raises:
            WorkspaceError: If the directory cannot be created or already exists
        """
        root = Path(root) if root is not None else Path(tempfile.gettempdir())
        path = root / f"{prefix}_{now()}_{secrets.token_hex(6)}"

        try:
            root.mkdir(parents=True, exist_ok=True)
            path.mkdir()
        except OSError as e:
            raise WorkspaceError(e.errno, f"Cannot create working directory {path}: {e.strerror}") from e

        _log_debug(f"Created working directory {path}")
        return cls(path)

    def exists(self) -> bool:
        return self.path.exists()

    def destroy(self) -> None:
        """Remove the directory tree. Does nothing if it is already gone."""
        if not self.path.exists():
            return

        shutil.rmtree(self.path)
        _log_debug(f"Removed working directory {self.path}")

    def __enter__(self) -> "WorkingDirectory":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"WorkingDirectory({str(self.path)!r})"

