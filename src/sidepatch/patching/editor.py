"""
SourceEditor: Whole-document reads and atomic writes.

Every patched file goes through here: read once, write once via temp file
and rename, so a document is either fully patched or untouched.
"""

import os
import difflib
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from sidepatch.logging_config import logger
from sidepatch.exceptions import PatchIOError
from sidepatch.paths import backup_name
from .config import PATCH_CONFIG


class SourceEditor:
    """
    Read and write source documents safely.

    Features:
    - Atomic writes (temp file + rename)
    - Optional timestamped backups
    - UTF-8 encoding handling
    - No newline translation, so untouched text keeps its exact bytes
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize source editor with optional config.

        Args:
            config: Optional config overrides (merges with PATCH_CONFIG)
        """
        self.config = {**PATCH_CONFIG, **(config or {})}

    def read(self, file_path: str) -> str:
        """
        Read a document exactly as stored, CR characters included.

        Raises:
            PatchIOError: If the file cannot be read or decoded
        """
        try:
            with open(file_path, 'r', encoding='utf-8', newline='') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise PatchIOError(file_path, str(e)) from e

        return text

    def write(self, file_path: str, text: str) -> None:
        """
        Write a document atomically, without newline translation.

        Raises:
            PatchIOError: If the temp file cannot be written or renamed
        """
        self._atomic_write(file_path, text)

    def create_backup(self, file_path: str) -> str:
        """
        Create a timestamped backup of a file.

        Args:
            file_path: Path to file to backup

        Returns:
            Path to backup file

        Raises:
            PatchIOError: If the backup cannot be written
        """
        backup_dir = Path(self.config["backup_dir"])
        backup_path = backup_dir / backup_name(file_path)

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(file_path, str(backup_path))
        except OSError as e:
            logger.error(f"Failed to create backup of {file_path}: {e}")
            raise PatchIOError(file_path, f"backup failed: {e}") from e

        logger.debug(f"Created backup: {backup_path}")
        return str(backup_path)

    def restore_backup(self, backup_path: str, target_path: str) -> None:
        """
        Restore file from backup.

        Raises:
            PatchIOError: If the copy fails
        """
        try:
            shutil.copy2(backup_path, target_path)
        except OSError as e:
            logger.error(f"Failed to restore backup: {e}")
            raise PatchIOError(target_path, f"restore failed: {e}") from e
        logger.info(f"Restored {target_path} from {backup_path}")

    def _atomic_write(self, file_path: str, content: str) -> None:
        """
        Write file atomically using temp file + rename.

        Args:
            file_path: Target file path
            content: Content to write
        """
        path = Path(file_path)

        try:
            # Same directory as the target so the rename stays on one filesystem
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            logger.error(f"Failed to create temp file: {e}")
            raise PatchIOError(file_path, str(e)) from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            if path.exists():
                shutil.copymode(str(path), temp_path)
            os.replace(temp_path, str(path))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error(f"Failed during atomic write: {e}")
            raise PatchIOError(file_path, str(e)) from e

        logger.debug(f"Atomic write completed: {file_path}")

    def generate_unified_diff(
        self,
        file_path: str,
        original_content: str,
        modified_content: str,
        max_diff_lines: Optional[int] = None
    ) -> str:
        """
        Generate unified diff between original and modified content.

        Args:
            file_path: Path to file (for diff header)
            original_content: Original file content
            modified_content: Modified file content
            max_diff_lines: Maximum diff lines before truncation

        Returns:
            Unified diff string (possibly truncated)
        """
        if max_diff_lines is None:
            max_diff_lines = self.config["max_diff_lines"]

        diff_lines = list(difflib.unified_diff(
            original_content.splitlines(keepends=True),
            modified_content.splitlines(keepends=True),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        ))

        if len(diff_lines) > max_diff_lines:
            return self._truncate_diff(diff_lines, max_diff_lines)

        return ''.join(diff_lines)

    def _truncate_diff(self, diff_lines: List[str], max_lines: int) -> str:
        kept = diff_lines[:max_lines]
        notice = f"\n[... {len(diff_lines) - max_lines} diff lines truncated ...]\n"
        return ''.join(kept) + notice
