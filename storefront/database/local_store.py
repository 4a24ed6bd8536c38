"""
Local key-value persistence

Plain serialized records keyed by name, the same way a browser keeps its
cart and last order in local storage. No schema versioning.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Well-known keys
CART_KEY = "cart"
GUEST_SESSION_KEY = "guestSessionId"
LAST_ORDER_EMAIL_KEY = "lastOrderEmail"
ORDER_CONFIRMATION_KEY = "orderConfirmation"


class KeyValueStore:
    """In-memory key-value store holding JSON text"""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def get_json(self, key: str, default: Any = None) -> Any:
        """Read and parse a record; unreadable records yield the default"""
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing stored {key}: {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))

    def _flush(self) -> None:
        pass


class JsonFileStore(KeyValueStore):
    """Key-value store backed by a single JSON file"""

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                self._data = {str(k): str(v) for k, v in loaded.items()}
            except (OSError, json.JSONDecodeError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable local store {self.path}: {e}")
                self._data = {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        os.replace(tmp_path, self.path)
