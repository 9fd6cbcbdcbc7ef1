"""Small key-value repository for the persisted records.

Each record is a JSON-compatible blob stored under a fixed key. Reads of
absent or malformed blobs give ``None``; write failures are logged and
reported as ``False`` so the in-memory state stays authoritative.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
from pathlib import Path
import json
import logging
import os
import re

logger = logging.getLogger(__name__)


class KeyValueStore:
    """get/set/clear over named records."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> bool:
        raise NotImplementedError

    def clear(self, key: str) -> bool:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        # raw serialised blobs, as a browser-style store keeps them
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.info("Ignoring malformed record %r", key)
            return None

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Cannot store record %r: %s", key, exc)
            return False
        return True

    def clear(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def raw(self, key: str) -> Optional[str]:
        return self._data.get(key)


def _safe_key(key: str) -> str:
    safe = re.sub(r"[^-_.A-Za-z0-9]+", "_", key.strip())
    return safe.strip("._") or "record"


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per record inside ``root``."""

    def __init__(self, root: os.PathLike[str] | str) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{_safe_key(key)}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.info("Ignoring unreadable record %s: %s", path, exc)
            return None

    def set(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(value, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not save record %s: %s", path, exc)
            try:
                tmp_path.unlink()
            except OSError:
                pass
            return False
        return True

    def clear(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove record %r: %s", key, exc)
            return False
        return True
