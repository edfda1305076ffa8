"""
Where sidepatch keeps its own files.

Everything lives under `.sidepatch/` in the directory the tool is run from,
which for build scripts is the checkout root:

.sidepatch/
├── backups/    # Pre-patch copies, one per write, timestamped
└── logs/       # sidepatch.log when SIDEPATCH_FILE_LOGGING is set
"""

from datetime import datetime
from pathlib import Path
from typing import Optional


class SidepatchPaths:
    """Resolve the `.sidepatch/` tree against a root (CWD unless given)."""

    DATA_DIR = ".sidepatch"
    BACKUPS_DIR = "backups"
    LOGS_DIR = "logs"
    LOG_FILE = "sidepatch.log"

    def __init__(self, root: Optional[Path] = None):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else Path.cwd()

    @property
    def data_dir(self) -> Path:
        return self.root / self.DATA_DIR

    @property
    def backups_dir(self) -> Path:
        return self.data_dir / self.BACKUPS_DIR

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / self.LOGS_DIR

    @property
    def log_file(self) -> Path:
        return self.logs_dir / self.LOG_FILE

    def ensure_dirs(self) -> None:
        for directory in (self.backups_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)


def backup_name(file_path: str, when: Optional[datetime] = None) -> str:
    """
    Name of the backup copy for a patched file.

    Timestamps carry microseconds, so repeated writes of one file get
    distinct names.
    """
    stamp = (when or datetime.now()).strftime("%Y%m%d_%H%M%S_%f")
    return f"{Path(file_path).name}.{stamp}.backup"


_paths: Optional[SidepatchPaths] = None


def get_paths(root: Optional[Path] = None) -> SidepatchPaths:
    """Shared instance for the CWD, or a fresh one for an explicit root."""
    global _paths
    if root is not None:
        return SidepatchPaths(root)
    if _paths is None:
        _paths = SidepatchPaths()
    return _paths


def reset_paths() -> None:
    """Forget the shared instance so the next lookup re-reads the CWD."""
    global _paths
    _paths = None
