"""Batch analysis of rip logs through the evaluator."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from .models import AnalysisResult, CompletionCounter, ResultCollection
from ..core.config import DashboardConfig
from ..core.exceptions import (
    AnalysisError,
    EvaluationError,
    PersistenceError,
    WorkerPoolError,
)
from ..evaluation.models import EvaluationReport
from ..evaluation.services import Evaluator
from ..storage.services import LogArchive

logger = logging.getLogger(__name__)


class ProgressWatcher(Protocol):
    """Blocks until ``counter`` reaches ``total``, reporting along the way."""

    def watch(self, counter: CompletionCounter, total: int) -> None:
        ...


class LogAnalyzer:
    """Runs rip logs through the evaluator on a worker pool."""

    def __init__(
        self,
        evaluator: Evaluator,
        archive: Optional[LogArchive] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize with an evaluator and optional raw log archive."""
        self.evaluator = evaluator
        self.archive = archive
        self.max_workers = max_workers or os.cpu_count() or 1

    def analyze_file(self, path: Path) -> AnalysisResult:
        """Read, evaluate and optionally archive a single log."""
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise AnalysisError(
                f"Failed to read file {path}", file_path=str(path), details=str(e)
            )

        try:
            report = self.evaluator.evaluate(b"", raw)
        except EvaluationError as e:
            raise AnalysisError(
                f"Failed to parse log {path}", file_path=str(path), details=str(e)
            )

        if self.archive is not None:
            try:
                self.archive.save(report.id, raw)
            except PersistenceError as e:
                logger.warning("Failed to save log (%s): %s", path, e)

        return AnalysisResult(path=path, report=report)

    def analyze(
        self, paths: Iterable[Path], progress: Optional[ProgressWatcher] = None
    ) -> List[AnalysisResult]:
        """Analyze every path and return the successful results.

        Per-file failures are logged and skipped. Returns only after every
        candidate has been processed; the order of results is unspecified.
        """
        candidates = list(paths)
        total = len(candidates)
        results = ResultCollection()
        counter = CompletionCounter()

        logger.debug(
            "Analyzing %d log(s) with %d worker(s)", total, self.max_workers
        )

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="analyze"
        ) as executor:
            futures = [
                executor.submit(self._process, path, results, counter)
                for path in candidates
            ]
            if progress is not None:
                progress.watch(counter, total)
            wait(futures)

        faults = [f.exception() for f in futures if f.exception() is not None]
        if faults:
            raise WorkerPoolError(
                f"Analysis worker crashed on {len(faults)} log(s)",
                details=repr(faults[0]),
            )

        collected = results.snapshot()
        logger.info(
            "Analyzed %d log(s): %d ok, %d failed",
            counter.value,
            len(collected),
            counter.value - len(collected),
        )
        return collected

    def _process(
        self, path: Path, results: ResultCollection, counter: CompletionCounter
    ) -> None:
        try:
            results.append(self.analyze_file(path))
        except AnalysisError as e:
            logger.error("%s", e)
        finally:
            counter.increment()


def is_ops_full_score(report: EvaluationReport) -> bool:
    """True when the report's OPS outcome scored exactly 100."""
    outcome = report.outcome(DashboardConfig.FULL_SCORE_EVALUATOR)
    if outcome is None:
        return False
    return outcome.combined_score.strip() == DashboardConfig.FULL_SCORE


def filter_results(
    results: Iterable[AnalysisResult], show_full_score: bool = False
) -> List[AnalysisResult]:
    """Hide logs with a full OPS score unless ``show_full_score`` is set."""
    if show_full_score:
        return list(results)
    return [result for result in results if not is_ops_full_score(result.report)]
