"""
Value-map snapshot store.
Keeps the last selected message type and its form values as flat JSON so a
console can pick up where it left off. Loaded values are never validated here.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from util.logging import logger
from . import config


class ValueMapStore:
    """JSON file holding one value-map snapshot under a storage key."""

    def __init__(self, path: str = None, storage_key: str = None):
        self.path = Path(path or config.STATE_PATH)
        self.storage_key = storage_key or config.STORAGE_KEY

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Tuple[Optional[str], Dict[str, Any]]:
        """Return (schema_id, values); (None, {}) when nothing usable is stored."""
        snapshot = self._read_all().get(self.storage_key)
        if not isinstance(snapshot, dict):
            return None, {}

        schema_id = snapshot.get("schemaId")
        values = snapshot.get("values")
        if not isinstance(values, dict):
            values = {}
        return (schema_id if isinstance(schema_id, str) else None), values

    def save(self, schema_id: Optional[str], values: Dict[str, Any]) -> None:
        data = self._read_all()
        data[self.storage_key] = {"schemaId": schema_id, "values": values}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def clear(self) -> None:
        data = self._read_all()
        if self.storage_key in data:
            del data[self.storage_key]
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
