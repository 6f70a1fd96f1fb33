import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from shared.config import SETTINGS_PATH

logger = logging.getLogger(__name__)


class SettingsStore:
    """
    Persisted configuration keys kept in a single JSON file.

    Keys use the dotted names of the original editor settings,
    e.g. ``notionSync.apiKey`` or ``confluenceSync.spaceKey``.
    """

    def __init__(self, path: str = SETTINGS_PATH):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Settings file {self.path} is not valid JSON, ignoring it")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        return self._read().get(key, default)

    def update(self, key: str, value: Optional[Any]):
        """Set a key; ``None`` removes it."""
        data = self._read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._write(data)
        logger.debug(f"Updated setting {key}")

    def clear(self, keys: Iterable[str]) -> int:
        data = self._read()
        removed = 0
        for key in keys:
            if key in data:
                del data[key]
                removed += 1
        self._write(data)
        return removed

    def items(self) -> Dict[str, Any]:
        return dict(self._read())
