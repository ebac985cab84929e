"""Tests for the typer CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from src.core.exceptions import DashboardError
from src.interface.cli import app

runner = CliRunner()


@pytest.fixture
def patched(fake_evaluator):
    """Replace the HTTP evaluator and the terminal dashboard."""
    with patch("src.interface.cli.CambiaEvaluator") as cambia, patch(
        "src.interface.cli.Dashboard"
    ) as dashboard:
        cambia.return_value.__enter__.return_value = fake_evaluator
        yield cambia, dashboard


def dashboard_state(dashboard):
    return dashboard.return_value.run.call_args[0][0]


class TestMain:
    """Tests for the riplog command."""

    def test_missing_path(self, tmp_path, patched):
        result = runner.invoke(app, [str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Cannot access path" in result.output

    def test_empty_directory(self, tmp_path, patched):
        (tmp_path / "cover.jpg").write_bytes(b"jpg")
        result = runner.invoke(app, [str(tmp_path)])
        assert result.exit_code == 1
        assert "No .log files found" in result.output

    def test_hides_full_scores(self, log_dir, patched):
        _, dashboard = patched
        result = runner.invoke(app, [str(log_dir)])

        assert result.exit_code == 0, result.output
        state = dashboard_state(dashboard)
        assert [e.path.name for e in state.entries] == ["album.LOG"]
        assert state.show_full_score is False
        assert "Hiding 1 log(s)" in result.output

    def test_show_100(self, log_dir, patched):
        _, dashboard = patched
        result = runner.invoke(app, [str(log_dir), "--show-100"])

        assert result.exit_code == 0, result.output
        state = dashboard_state(dashboard)
        assert {e.path.name for e in state.entries} == {"album.log", "album.LOG"}
        assert state.show_full_score is True

    def test_save_logs(self, log_dir, tmp_path, patched):
        saved = tmp_path / "saved"
        result = runner.invoke(app, [str(log_dir), "--save-logs", str(saved)])

        assert result.exit_code == 0, result.output
        files = sorted(saved.iterdir())
        assert len(files) == 2
        assert all(f.suffix == ".log" and len(f.stem) == 32 for f in files)

    def test_evaluator_url(self, log_dir, patched):
        cambia, _ = patched
        runner.invoke(app, [str(log_dir), "--evaluator-url", "http://cambia.test"])
        cambia.assert_called_once_with("http://cambia.test")

    def test_dashboard_failure(self, log_dir, patched):
        _, dashboard = patched
        dashboard.return_value.run.side_effect = DashboardError(
            "Dashboard failed", details="no controlling terminal"
        )

        result = runner.invoke(app, [str(log_dir)])
        assert result.exit_code == 1
        assert "Dashboard failed" in result.output

    def test_worker_pool_failure(self, log_dir, patched):
        cambia, _ = patched
        crashing = cambia.return_value.__enter__.return_value
        crashing.evaluate = lambda prior_id, raw: 1 / 0

        result = runner.invoke(app, [str(log_dir)])
        assert result.exit_code == 1
        assert "Analysis worker crashed" in result.output
