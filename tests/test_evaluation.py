"""Tests for evaluation/services.py - evaluator client and report parsing."""

import json

import httpx
import pytest

from src.core.exceptions import EvaluationError
from src.evaluation.models import UnitScope
from src.evaluation.services import CambiaEvaluator, parse_report

PAYLOAD = {
    "id": [222, 173, 190, 239],
    "evaluation_combined": [
        {
            "evaluator": "OPS",
            "combined_score": "80",
            "evaluations": [
                {
                    "score": "80",
                    "evaluation_units": [
                        {
                            "unit_score": "-20",
                            "data": {
                                "scope": "Release",
                                "field": "ReadMode",
                                "class": "Critical",
                                "message": "Secure mode not used",
                            },
                        },
                        {
                            "unit_score": "-1",
                            "data": {
                                "scope": {"Track": 4},
                                "field": "TestAndCopy",
                                "class": "Bad",
                                "message": "CRC mismatch",
                            },
                        },
                    ],
                }
            ],
        },
        {"evaluator": "RED", "combined_score": "100", "evaluations": []},
    ],
}


class TestParseReport:
    """Tests for parse_report."""

    def test_full_payload(self):
        report = parse_report(PAYLOAD)

        assert report.id == b"\xde\xad\xbe\xef"
        assert report.id_hex == "deadbeef"
        assert [o.evaluator for o in report.outcomes] == ["OPS", "RED"]

        ops = report.outcome("OPS")
        units = ops.evaluations[0].units
        assert ops.combined_score == "80"
        assert units[0].scope == UnitScope.release()
        assert units[0].unit_class == "Critical"
        assert units[1].scope.label == "Track 4"
        assert units[1].unit_score == "-1"

    def test_hex_identifier(self):
        report = parse_report({"id": "0a0b", "evaluation_combined": []})
        assert report.id == b"\x0a\x0b"
        assert report.outcomes == ()

    @pytest.mark.parametrize(
        "scope,label",
        [("Release", "Release"), ("Track", "Track"), ({"Track": None}, "Track")],
    )
    def test_scope_labels(self, scope, label):
        payload = json.loads(json.dumps(PAYLOAD))
        payload["evaluation_combined"][0]["evaluations"][0]["evaluation_units"][0][
            "data"
        ]["scope"] = scope

        report = parse_report(payload)
        assert report.outcomes[0].evaluations[0].units[0].scope.label == label

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"id": 12},
            {"id": "zz"},
            {"id": [], "evaluation_combined": [{"combined_score": "1"}]},
            {"id": [], "evaluation_combined": ["OPS"]},
            {
                "id": [],
                "evaluation_combined": [
                    {
                        "evaluator": "OPS",
                        "combined_score": "1",
                        "evaluations": [
                            {
                                "score": "1",
                                "evaluation_units": [
                                    {"unit_score": "1", "data": {"scope": "Disc"}}
                                ],
                            }
                        ],
                    }
                ],
            },
        ],
    )
    def test_malformed_payload(self, payload):
        with pytest.raises(EvaluationError):
            parse_report(payload)


class TestCambiaEvaluator:
    """Tests for CambiaEvaluator against a mock transport."""

    def test_uploads_raw_bytes(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=PAYLOAD)

        evaluator = CambiaEvaluator(
            "http://cambia.test", transport=httpx.MockTransport(handler)
        )
        report = evaluator.evaluate(b"", b"raw log")

        assert report.id_hex == "deadbeef"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/v1/upload"
        assert seen[0].content == b"raw log"
        assert "X-Cambia-Id" not in seen[0].headers

    def test_sends_prior_identifier(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=PAYLOAD)

        with CambiaEvaluator(
            "http://cambia.test", transport=httpx.MockTransport(handler)
        ) as evaluator:
            evaluator.evaluate(b"\x01\xff", b"raw log")

        assert seen[0].headers["X-Cambia-Id"] == "01ff"

    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("CAMBIA_URL", "http://env.test:9000/")
        evaluator = CambiaEvaluator(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=PAYLOAD))
        )
        assert evaluator.base_url == "http://env.test:9000"

    def test_rejection(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(400, text="unsupported ripper")
        )
        evaluator = CambiaEvaluator("http://cambia.test", transport=transport)

        with pytest.raises(EvaluationError) as exc_info:
            evaluator.evaluate(b"", b"garbage")
        assert exc_info.value.status_code == 400
        assert "unsupported ripper" in str(exc_info.value)

    def test_unreachable_server(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        evaluator = CambiaEvaluator(
            "http://cambia.test", transport=httpx.MockTransport(handler)
        )
        with pytest.raises(EvaluationError, match="Failed to reach evaluator"):
            evaluator.evaluate(b"", b"raw")

    def test_invalid_json(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>")
        )
        evaluator = CambiaEvaluator("http://cambia.test", transport=transport)
        with pytest.raises(EvaluationError, match="invalid JSON"):
            evaluator.evaluate(b"", b"raw")
