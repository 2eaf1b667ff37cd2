from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_KEY = "darkMode"
DEFAULT_STORAGE_PATH = Path.home() / ".newsdash" / "preferences.json"


class ThemePreferenceStore:
    """Persist the dark mode flag in a small JSON document."""

    def __init__(self, path: Path = DEFAULT_STORAGE_PATH) -> None:
        self._path = Path(path)
        self._dark = False

    @property
    def is_dark(self) -> bool:
        return self._dark

    def load(self) -> bool:
        if not self._path.exists():
            self._dark = False
            return self._dark
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load theme preference from %s: %s", self._path, exc)
            data = None
        self._dark = isinstance(data, dict) and data.get(STORAGE_KEY) is True
        return self._dark

    def set_dark(self, value: bool) -> None:
        self._dark = bool(value)
        self._save()

    def toggle(self) -> bool:
        self.set_dark(not self._dark)
        return self._dark

    def _save(self) -> None:
        data: dict[str, object] = {}
        if self._path.exists():
            try:
                with self._path.open("r", encoding="utf-8") as handle:
                    existing = json.load(handle)
                if isinstance(existing, dict):
                    data = existing
            except (OSError, json.JSONDecodeError):
                logger.debug("Overwriting unreadable preferences at %s", self._path)
        data[STORAGE_KEY] = self._dark

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        os.replace(tmp_path, self._path)
