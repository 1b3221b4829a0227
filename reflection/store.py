# reflection/store.py

from abc import ABC, abstractmethod
from collections import deque
from threading import Lock
from typing import Any, Dict, List

Report = Dict[str, Any]


class ReportStore(ABC):

    @abstractmethod
    def append(self, report: Report) -> None:
        """
        Record one result() report. Stored reports are never edited
        or removed by callers.
        """
        raise NotImplementedError

    @abstractmethod
    def all(self) -> List[Report]:
        """
        Snapshot list of the reports currently held, oldest first.
        Changing the list does not change the store.
        """
        raise NotImplementedError


class InMemoryReportStore(ReportStore):
    """
    Bounded buffer; the oldest reports drop out once `limit` is reached.
    """

    def __init__(self, limit: int = 10000):
        self._reports: deque[Report] = deque(maxlen=limit)
        self._lock = Lock()

    def __len__(self):
        with self._lock:
            return len(self._reports)

    def append(self, report: Report) -> None:
        with self._lock:
            self._reports.append(report)

    def all(self) -> List[Report]:
        with self._lock:
            return list(self._reports)
