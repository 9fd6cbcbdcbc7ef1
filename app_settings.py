from __future__ import annotations
from typing import Any, Dict
import copy
import json
import logging
import os

_SETTINGS_FILENAME = 'settings.json'

logger = logging.getLogger(__name__)


def _settings_path(data_dir: str | os.PathLike[str]) -> str:
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, _SETTINGS_FILENAME)


def default_settings() -> Dict[str, Any]:
    return {
        'narrative': {
            'short_text_chars': 30,
            'long_text_chars': 90,
        },
        'asymmetry': {
            'min_difference_db': 15,
            'min_frequencies': 2,
        },
        'chart': {
            'width': 1050,
            'height': 450,
        },
        'export_dir': None,
        'log_level': 'INFO',
    }


def _compatible(value: Any, default: Any) -> bool:
    if default is None:
        return value is None or isinstance(value, str)
    if isinstance(default, (int, float)) and not isinstance(default, bool):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default))


def _merge_defaults(data: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in defaults.items():
        if isinstance(value, dict):
            current = data.get(key)
            if not isinstance(current, dict):
                current = {}
                data[key] = current
            _merge_defaults(current, value)
        elif key not in data:
            data[key] = value
        elif not _compatible(data[key], value):
            logger.info("Setting %r has invalid value %r, using %r", key, data[key], value)
            data[key] = value
    return data


def load_settings(data_dir: str | os.PathLike[str]) -> Dict[str, Any]:
    path = _settings_path(data_dir)
    if not os.path.exists(path):
        return default_settings()
    try:
        with open(path, 'r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.info("Settings unreadable (%s), using defaults", exc)
        return default_settings()
    if not isinstance(data, dict):
        return default_settings()
    return _merge_defaults(data, default_settings())


def save_settings(data_dir: str | os.PathLike[str], settings: Dict[str, Any]) -> None:
    path = _settings_path(data_dir)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, 'w', encoding='utf-8') as handle:
        json.dump(copy.deepcopy(settings), handle, ensure_ascii=False, indent=2)
    os.replace(tmp_path, path)
