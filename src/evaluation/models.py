"""Evaluation report domain models."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class UnitScope:
    """Whether a deduction applies to the whole release or to one track."""

    is_track: bool = False
    track: Optional[int] = None

    @classmethod
    def release(cls) -> "UnitScope":
        return cls()

    @classmethod
    def for_track(cls, track: Optional[int] = None) -> "UnitScope":
        return cls(is_track=True, track=track)

    @property
    def label(self) -> str:
        """Human-readable scope label."""
        if not self.is_track:
            return "Release"
        if self.track is None:
            return "Track"
        return f"Track {self.track}"


@dataclass(frozen=True)
class EvaluationUnit:
    """One scored deduction line."""

    scope: UnitScope
    field: str
    unit_class: str
    message: str
    unit_score: str


@dataclass(frozen=True)
class FileEvaluation:
    """Evaluation of a single log inside a report."""

    score: str
    units: Tuple[EvaluationUnit, ...] = ()


@dataclass(frozen=True)
class EvaluatorOutcome:
    """Result of one evaluator rule-set, e.g. OPS."""

    evaluator: str
    combined_score: str
    evaluations: Tuple[FileEvaluation, ...] = ()


@dataclass(frozen=True)
class EvaluationReport:
    """Structured report returned by the evaluator for one log."""

    id: bytes
    outcomes: Tuple[EvaluatorOutcome, ...] = ()

    @property
    def id_hex(self) -> str:
        """Hex-encoded identifier."""
        return self.id.hex()

    def outcome(self, evaluator: str) -> Optional[EvaluatorOutcome]:
        """First outcome produced by the given evaluator kind, if any."""
        for outcome in self.outcomes:
            if outcome.evaluator == evaluator:
                return outcome
        return None
