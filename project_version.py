"""Semantic version of BTX AudioLaudo, read from the ``VERSION`` file."""

from __future__ import annotations

import re
import sys
from pathlib import Path

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$"
)
_VERSION_FILENAME = "VERSION"
FALLBACK_VERSION = "0.0.0"


def _candidate_paths() -> list[Path]:
    base_dir = Path(__file__).resolve().parent
    candidates = [base_dir / _VERSION_FILENAME]
    # frozen builds unpack data files next to the bundle
    bundle_dir = Path(getattr(sys, "_MEIPASS", base_dir))
    if bundle_dir != base_dir:
        candidates.append(bundle_dir / _VERSION_FILENAME)
    return candidates


def read_version() -> str:
    """Return the first valid version found, ``0.0.0`` when no file is present."""
    for path in _candidate_paths():
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if not raw:
            continue
        if not _SEMVER_RE.fullmatch(raw):
            raise ValueError(f"Invalid semantic version: {raw!r}")
        return raw
    return FALLBACK_VERSION


try:
    __version__ = read_version()
except ValueError:
    __version__ = FALLBACK_VERSION

__all__ = ["__version__", "read_version"]
