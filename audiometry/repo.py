from __future__ import annotations
from typing import Optional
import logging

from audiometry.report import Report
from storage.kv import KeyValueStore

REPORT_KEY = "btx_audiolaudo_v2"

logger = logging.getLogger(__name__)


class ReportRepository:
    """Persists the single current report under a fixed key."""

    def __init__(self, store: KeyValueStore, key: str = REPORT_KEY) -> None:
        self.store = store
        self.key = key

    def load(self, today: Optional[str] = None) -> Report:
        data = self.store.get(self.key)
        if data is not None and not isinstance(data, dict):
            logger.info("Stored report is not an object, starting empty")
        return Report.from_dict(data, today=today)

    def save(self, report: Report) -> bool:
        return self.store.set(self.key, report.to_dict())

    def clear(self) -> bool:
        return self.store.clear(self.key)
