"""Configuration constants and settings for the rip log inspector."""

import os
from pathlib import Path
from typing import Optional


class ScanConfig:
    """Log discovery configuration."""

    LOG_SUFFIX = ".log"


class ProgressConfig:
    """Progress bar and display configuration."""

    PROGRESS_UPDATE_INTERVAL_MS = 100
    SPINNER_STYLE = "dots"
    PROGRESS_BAR_WIDTH = 40


class EvaluatorConfig:
    """Evaluation server connection settings."""

    DEFAULT_URL = "http://127.0.0.1:3031"
    URL_ENV_VAR = "CAMBIA_URL"
    UPLOAD_PATH = "/api/v1/upload"
    ID_HEADER = "X-Cambia-Id"
    REQUEST_TIMEOUT_S = 30.0
    USER_AGENT = "riplog/1.0"

    @classmethod
    def resolve_url(cls, url: Optional[str] = None) -> str:
        """Explicit URL first, then environment, then the default."""
        return (url or os.getenv(cls.URL_ENV_VAR) or cls.DEFAULT_URL).rstrip("/")


class DashboardConfig:
    """Terminal dashboard layout."""

    SUMMARY_HEIGHT = 5
    TABLE_HEIGHT = 5
    HELP_HEIGHT = 3
    FILE_LIST_RATIO = 3
    DETAIL_RATIO = 7
    SCROLL_STEP = 5
    HIGHLIGHT_SYMBOL = "▶ "

    # Only OPS outcomes are hidden at full score
    FULL_SCORE_EVALUATOR = "OPS"
    FULL_SCORE = "100"


class LoggingConfig:
    """Logging defaults."""

    DEFAULT_LEVEL = "info"


class AppInfo:
    """Application metadata."""

    NAME = "riplog"
    VERSION = "1.0.0"
    DESCRIPTION = "CD rip log checker"


class Paths:
    """Default paths and directories."""

    @staticmethod
    def ensure_dir(path: Path) -> Path:
        """Ensure directory exists and return it."""
        path.mkdir(parents=True, exist_ok=True)
        return path
