from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os
import platform

APP_NAME = "BTXAudioLaudo"
DATA_DIR_ENV = "AUDIOLAUDO_DATA_DIR"
LOG_FILENAME = "audiolaudo.log"


@dataclass(frozen=True)
class DataDirectories:
    root: Path
    records: Path
    export: Path

    @property
    def log_file(self) -> Path:
        return self.root / LOG_FILENAME


def _platform_root() -> Path:
    system = platform.system().lower()
    if "windows" in system:
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
        return Path(base) / APP_NAME
    if "darwin" in system:
        return Path.home() / "Library" / "Application Support" / APP_NAME
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


def resolve_root(override: Optional[str | os.PathLike[str]] = None) -> Path:
    if override:
        return Path(override).expanduser()
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return _platform_root()


def ensure_data_dirs(override: Optional[str | os.PathLike[str]] = None) -> DataDirectories:
    root = resolve_root(override)
    records = root / 'Records'
    export = root / 'Export'
    for path in (root, records, export):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
    return DataDirectories(root=root, records=records, export=export)
