"""File services for discovering and archiving rip logs."""

import logging
import os
import stat
from pathlib import Path
from typing import List, Optional

from ..core.config import Paths, ScanConfig
from ..core.exceptions import (
    EmptyResultError,
    InvalidInputError,
    NotAccessibleError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


def collect_log_paths(root: Path, suffix: str = ScanConfig.LOG_SUFFIX) -> List[Path]:
    """Return the rip logs to analyze under ``root``.

    A regular file is returned as-is whatever its name. A directory is walked
    recursively and every regular file whose suffix matches ``suffix``
    (case-insensitively) is returned, in a stable walk order.
    """
    try:
        mode = root.stat().st_mode
    except OSError as e:
        raise NotAccessibleError(
            f"Cannot access path {root}", path=str(root), details=e.strerror or str(e)
        )

    if stat.S_ISREG(mode):
        return [root]

    if not stat.S_ISDIR(mode):
        raise InvalidInputError(
            f"Path {root} is neither a file nor a directory", path=str(root)
        )

    wanted = suffix.lower()
    log_paths = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix.lower() == wanted and path.is_file():
                log_paths.append(path)

    if not log_paths:
        raise EmptyResultError(
            f"No {suffix} files found in directory {root}", path=str(root)
        )

    logger.debug("Found %d log file(s) under %s", len(log_paths), root)
    return log_paths


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable entry %s: %s", error.filename, error.strerror)


class LogArchive:
    """Stores raw rip log bytes keyed by evaluator identifier."""

    def __init__(self, root: Path):
        """Initialize with the archive directory."""
        self.root = root

    def path_for(self, identifier: bytes) -> Path:
        """Archive location for a log identifier."""
        return self.root / f"{identifier.hex()}{ScanConfig.LOG_SUFFIX}"

    def save(self, identifier: bytes, raw: bytes) -> Optional[Path]:
        """Write ``raw`` unless a log with the same identifier already exists.

        Returns the written path, or None when the file was already present.
        The first writer wins; later writers never touch existing bytes.
        """
        try:
            Paths.ensure_dir(self.root)
        except OSError as e:
            raise PersistenceError(
                f"Failed to create directory {self.root}",
                file_path=str(self.root),
                operation="mkdir",
                details=str(e),
            )

        file_path = self.path_for(identifier)
        if file_path.exists():
            return None

        try:
            with open(file_path, "xb") as f:
                f.write(raw)
        except FileExistsError:
            return None
        except OSError as e:
            raise PersistenceError(
                f"Failed to write log {file_path}",
                file_path=str(file_path),
                operation="write",
                details=str(e),
            )

        logger.debug("Saved log %s", file_path)
        return file_path
