"""Shared fixtures for the rip log inspector tests."""

import hashlib
import logging
import threading
from pathlib import Path

import pytest

from src.core.exceptions import EvaluationError
from src.evaluation.models import (
    EvaluationReport,
    EvaluationUnit,
    EvaluatorOutcome,
    FileEvaluation,
    UnitScope,
)
from src.processing.models import AnalysisResult


def make_unit(unit_score="-5", message="Deduction", track=None):
    scope = UnitScope.for_track(track) if track is not None else UnitScope.release()
    return EvaluationUnit(
        scope=scope,
        field="ReadMode",
        unit_class="Critical",
        message=message,
        unit_score=unit_score,
    )


def make_report(ops_score="95", identifier=b"\x01\x02", units=(), extra=()):
    outcomes = (
        EvaluatorOutcome(
            evaluator="OPS",
            combined_score=ops_score,
            evaluations=(FileEvaluation(score=ops_score, units=tuple(units)),),
        ),
    ) + tuple(extra)
    return EvaluationReport(id=identifier, outcomes=outcomes)


class FakeEvaluator:
    """Scores logs from their content.

    Logs starting with ``bad`` are rejected, logs containing ``perfect`` get a
    full OPS score, and anything else scores 95. The identifier is the MD5 of
    the raw bytes.
    """

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def evaluate(self, prior_id: bytes, raw: bytes) -> EvaluationReport:
        with self._lock:
            self.calls.append((prior_id, raw))
        if raw.startswith(b"bad"):
            raise EvaluationError("Unsupported log format")
        score = "100" if b"perfect" in raw else "95"
        return make_report(
            ops_score=score,
            identifier=hashlib.md5(raw).digest(),
            units=(make_unit("-5", "Defeat audio cache not enabled"),),
        )


@pytest.fixture
def fake_evaluator():
    return FakeEvaluator()


@pytest.fixture
def report_factory():
    return make_report


@pytest.fixture
def unit_factory():
    return make_unit


@pytest.fixture
def result_factory():
    def _make(name="rip.log", **kwargs):
        return AnalysisResult(path=Path("/music") / name, report=make_report(**kwargs))

    return _make


@pytest.fixture
def log_dir(tmp_path):
    """Directory with two good logs, one rejected log and a text file."""
    root = tmp_path / "rips"
    (root / "disc2").mkdir(parents=True)
    (root / "album.log").write_bytes(b"EAC extraction logfile\nperfect\n")
    (root / "disc2" / "album.LOG").write_bytes(b"XLD extraction logfile\n")
    (root / "broken.log").write_bytes(b"bad data")
    (root / "notes.txt").write_text("not a log")
    return root


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
