"""Opening a log's containing folder in the platform file manager."""

import logging
import os
import platform
import subprocess
from pathlib import Path
from typing import List, Optional

from ..core.exceptions import FolderRevealError

logger = logging.getLogger(__name__)


class FolderRevealer:
    """Opens the folder containing a path with an external program."""

    program: str = ""

    def target_for(self, path: Path) -> Path:
        """Folder to open: the parent of a file, or the path itself."""
        if path.is_file():
            return path.parent
        return path

    def command(self, target: Path) -> List[str]:
        return [self.program, str(target)]

    def reveal(self, path: Path) -> None:
        """Spawn the file manager without waiting for it."""
        target = self.target_for(path)
        try:
            subprocess.Popen(
                self.command(target),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise FolderRevealError(
                f"Cannot open folder {target}", path=str(target), details=str(e)
            )
        logger.debug("Opened %s with %s", target, self.program)


class ExplorerRevealer(FolderRevealer):
    program = "explorer"


class FinderRevealer(FolderRevealer):
    program = "open"


class XdgRevealer(FolderRevealer):
    program = "xdg-open"


class UnsupportedRevealer(FolderRevealer):
    """Fallback for platforms without a known file manager."""

    def reveal(self, path: Path) -> None:
        raise FolderRevealError(
            "Opening folders is not supported on this platform", path=str(path)
        )


def get_folder_revealer(system: Optional[str] = None) -> FolderRevealer:
    """Pick the revealer for ``system`` (defaults to the running platform)."""
    system = system if system is not None else platform.system()
    if system == "Windows":
        return ExplorerRevealer()
    if system == "Darwin":
        return FinderRevealer()
    if system in ("Linux", "FreeBSD", "OpenBSD", "NetBSD", "SunOS") or (
        not system and os.name == "posix"
    ):
        return XdgRevealer()
    return UnsupportedRevealer()
