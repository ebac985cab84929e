"""Evaluator client for scoring rip logs."""

from typing import Any, Dict, List, Optional, Protocol

import httpx

from .models import (
    EvaluationReport,
    EvaluationUnit,
    EvaluatorOutcome,
    FileEvaluation,
    UnitScope,
)
from ..core.config import EvaluatorConfig
from ..core.exceptions import EvaluationError


class Evaluator(Protocol):
    """Anything that turns raw log bytes into an evaluation report."""

    def evaluate(self, prior_id: bytes, raw: bytes) -> EvaluationReport:
        ...


class CambiaEvaluator:
    """Evaluator backed by a running cambia evaluation server."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = EvaluatorConfig.REQUEST_TIMEOUT_S,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize with optional server URL and transport."""
        self.base_url = EvaluatorConfig.resolve_url(base_url)
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": EvaluatorConfig.USER_AGENT},
        )

    def evaluate(self, prior_id: bytes, raw: bytes) -> EvaluationReport:
        """Upload one log and parse the returned report."""
        headers = {"Content-Type": "application/octet-stream"}
        if prior_id:
            headers[EvaluatorConfig.ID_HEADER] = prior_id.hex()

        try:
            response = self.client.post(
                EvaluatorConfig.UPLOAD_PATH, content=raw, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EvaluationError(
                "Evaluator rejected log",
                status_code=e.response.status_code,
                details=e.response.text.strip() or str(e),
            )
        except httpx.HTTPError as e:
            raise EvaluationError(
                f"Failed to reach evaluator at {self.base_url}", details=str(e)
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise EvaluationError("Evaluator returned invalid JSON", details=str(e))

        return parse_report(payload)

    def close(self) -> None:
        """Release pooled connections."""
        self.client.close()

    def __enter__(self) -> "CambiaEvaluator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def parse_report(payload: Dict[str, Any]) -> EvaluationReport:
    """Convert an evaluator JSON response to an EvaluationReport."""
    if not isinstance(payload, dict):
        raise EvaluationError("Malformed evaluation report", details="not an object")

    try:
        return EvaluationReport(
            id=_parse_id(payload.get("id", [])),
            outcomes=tuple(
                _parse_outcome(item)
                for item in payload.get("evaluation_combined") or []
            ),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise EvaluationError("Malformed evaluation report", details=str(e))


def _parse_id(value: Any) -> bytes:
    """Identifiers arrive either as a byte array or as a hex string."""
    if isinstance(value, str):
        return bytes.fromhex(value)
    if isinstance(value, list):
        return bytes(value)
    raise TypeError(f"unsupported id type {type(value).__name__}")


def _parse_outcome(item: Dict[str, Any]) -> EvaluatorOutcome:
    evaluations: List[FileEvaluation] = []
    for evaluation in item.get("evaluations") or []:
        units = tuple(
            _parse_unit(unit) for unit in evaluation.get("evaluation_units") or []
        )
        evaluations.append(FileEvaluation(score=str(evaluation["score"]), units=units))

    return EvaluatorOutcome(
        evaluator=str(item["evaluator"]),
        combined_score=str(item["combined_score"]),
        evaluations=tuple(evaluations),
    )


def _parse_unit(unit: Dict[str, Any]) -> EvaluationUnit:
    data = unit["data"]
    return EvaluationUnit(
        scope=_parse_scope(data.get("scope", "Release")),
        field=str(data.get("field", "")),
        unit_class=str(data.get("class", "")),
        message=str(data.get("message", "")),
        unit_score=str(unit["unit_score"]),
    )


def _parse_scope(scope: Any) -> UnitScope:
    """Scope is either "Release", "Track" or {"Track": <number or null>}."""
    if scope == "Release":
        return UnitScope.release()
    if scope == "Track":
        return UnitScope.for_track()
    if isinstance(scope, dict) and "Track" in scope:
        track = scope["Track"]
        return UnitScope.for_track(int(track) if track is not None else None)
    raise ValueError(f"unknown scope {scope!r}")
