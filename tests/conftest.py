from __future__ import annotations

import os
from typing import Any, List, Tuple

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

from app_controller import AppController
from storage.kv import KeyValueStore, MemoryStore

TODAY = "2024-03-05"


class FailingStore(KeyValueStore):
    """Reads nothing, refuses every write."""

    def get(self, key: str) -> Any:
        return None

    def set(self, key: str, value: Any) -> bool:
        return False

    def clear(self, key: str) -> bool:
        return False


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def controller(store, tmp_path) -> AppController:
    ctl = AppController(store, export_dir=tmp_path, today=lambda: TODAY)
    ctl.load()
    return ctl


@pytest.fixture
def events(controller) -> List[Tuple[str, Any]]:
    received: List[Tuple[str, Any]] = []
    controller.subscribe(lambda event, payload: received.append((event, payload)))
    return received


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()
