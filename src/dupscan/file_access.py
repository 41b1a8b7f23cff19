# dupscan - Find and rank duplicate code across a project
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Project file access - lists and reads source files from disk.

The analyzer talks to any object with `list_project_text_files` and
`read_text_file`; LocalFileAccess is the file-system implementation.
"""

from pathlib import Path
from typing import List, Optional, Protocol, Sequence
import fnmatch
import logging

from .languages import EXTENSION_MAP

logger = logging.getLogger(__name__)


# Default patterns to always exclude
DEFAULT_EXCLUDES = [
    "*.git/*",
    "*node_modules/*",
    "*__pycache__/*",
    "*venv/*",
    "*.egg-info/*",
    "*build/*",
    "*dist/*",
    "*.tox/*",
    "*target/*",  # Rust
    "*.build/*",  # Swift
    "*DerivedData/*",  # Xcode
    "*Pods/*",  # CocoaPods
    "*vendor/*",
    "*.cache/*",
    "*.min.js",
]

DEFAULT_MAX_FILE_SIZE = 1024 * 1024


class FileAccess(Protocol):
    """What the analyzer needs from the file system."""

    def list_project_text_files(self, project_path: str) -> List[str]:
        ...

    def read_text_file(self, path: str) -> str:
        ...


class LocalFileAccess:
    """
    Walks a directory tree for source files with a known extension.

    Args:
        exclude_patterns: Glob patterns to exclude (added to defaults)
        focus_patterns: Only include files matching these patterns
        max_file_size: Skip files larger than this many bytes
    """

    def __init__(
        self,
        exclude_patterns: Optional[Sequence[str]] = None,
        focus_patterns: Optional[Sequence[str]] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.exclude_patterns = DEFAULT_EXCLUDES + list(exclude_patterns or [])
        self.focus_patterns = list(focus_patterns or [])
        self.max_file_size = max_file_size

    def list_project_text_files(self, project_path: str) -> List[str]:
        """
        Find all source files under project_path.

        Returns:
            Sorted list of absolute file paths

        Raises:
            NotADirectoryError: If project_path is not a directory
        """
        root_path = Path(project_path).resolve()
        if not root_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {project_path}")

        source_files = []
        for file_path in root_path.rglob("*"):
            if not file_path.is_file():
                continue

            if file_path.suffix.lower() not in EXTENSION_MAP:
                continue

            # Make relative for pattern matching
            rel_path = file_path.relative_to(root_path).as_posix()

            if any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(str(file_path), pat)
                   for pat in self.exclude_patterns):
                continue

            # Focus patterns: if given, file must match at least one
            if self.focus_patterns:
                if not any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(file_path.name, pat)
                           for pat in self.focus_patterns):
                    continue

            try:
                size = file_path.stat().st_size
            except OSError as e:
                logger.warning(f"Cannot stat {file_path}: {e}")
                continue
            if size > self.max_file_size:
                logger.debug(f"Skipping {rel_path}: {size} bytes exceeds {self.max_file_size}")
                continue

            source_files.append(str(file_path))

        return sorted(source_files)

    def read_text_file(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace")
