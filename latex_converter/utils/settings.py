"""
Per-context plugin settings.

Settings are stored in a YAML file keyed by context (journal) id:

    contexts:
      "1":
        LatexConverter_PathToExecutable: /usr/bin/pdflatex
        LatexConverter_GenreIds:
          image: 10
          style: 11
          other: 12

Loaded and saved with OmegaConf. A missing file behaves as empty settings.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
SETTINGS_PATH = Path(os.getenv("LATEX_CONVERTER_SETTINGS", "config/settings.yaml"))

SETTING_PATH_EXECUTABLE = "LatexConverter_PathToExecutable"
SETTING_AUTHORISED_MIME_TYPES = "LatexConverter_AuthorisedMimeTypes"
SETTING_GENRE_IDS = "LatexConverter_GenreIds"


class PluginSettings:
    """
    Plugin settings keyed by context id.

    Example:
        settings = PluginSettings()
        settings.set(1, SETTING_PATH_EXECUTABLE, "/usr/bin/pdflatex")
        settings.save()
        settings.latex_executable(1)  # "/usr/bin/pdflatex"
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path is not None else SETTINGS_PATH
        self._data: Dict[str, Dict[str, Any]] = self._load()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.settings_path.exists():
            return {}

        loaded = OmegaConf.to_container(OmegaConf.load(self.settings_path), resolve=True) or {}
        contexts = loaded.get("contexts") or {}
        return {str(context_id): dict(values or {}) for context_id, values in contexts.items()}

    def get(self, context_id: int, key: str, default: Any = None) -> Any:
        """Return a setting for a context, or default when unset."""
        return self._data.get(str(context_id), {}).get(key, default)

    def set(self, context_id: int, key: str, value: Any) -> None:
        """Set a setting in memory. Call save() to persist."""
        self._data.setdefault(str(context_id), {})[key] = value

    def save(self) -> None:
        """Write all settings back to the YAML file."""
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        OmegaConf.save(OmegaConf.create({"contexts": self._data}), self.settings_path)

    def latex_executable(self, context_id: int) -> Optional[str]:
        """Absolute path to the LaTeX executable, or None when not configured."""
        value = self.get(context_id, SETTING_PATH_EXECUTABLE)
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    def authorised_mime_types(self, context_id: int) -> List[str]:
        """MIME types accepted as dependent files by the extraction step."""
        value = self.get(context_id, SETTING_AUTHORISED_MIME_TYPES) or []
        if isinstance(value, str):
            value = value.split(",")
        return [mime.strip() for mime in value if mime and mime.strip()]

    def genre_ids(self, context_id: int) -> Dict[str, int]:
        """Genre id overrides for this context ({"image": 10, ...}); empty when unset."""
        value = self.get(context_id, SETTING_GENRE_IDS) or {}
        return {str(name).lower(): int(genre_id) for name, genre_id in value.items()}
