"""Analysis domain models."""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..evaluation.models import EvaluationReport


@dataclass(frozen=True)
class AnalysisResult:
    """A log path together with its evaluation report."""

    path: Path
    report: EvaluationReport

    @property
    def display_name(self) -> str:
        """File name, or the full path when there is none."""
        return self.path.name or str(self.path)


class ResultCollection:
    """Append-only result list shared by analysis workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._results: List[AnalysisResult] = []

    def append(self, result: AnalysisResult) -> None:
        with self._lock:
            self._results.append(result)

    def snapshot(self) -> List[AnalysisResult]:
        """Copy of the results collected so far."""
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


class CompletionCounter:
    """Number of candidates processed, successfully or not."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
