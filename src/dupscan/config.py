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
Configuration file support for dupscan.

Looks for .dupscanrc or .dupscan.toml in the project directory or any
parent directory.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Dict, Any, List
import logging

try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # type: ignore
    except ImportError:
        tomllib = None  # type: ignore

from .file_access import DEFAULT_MAX_FILE_SIZE
from .similarity import SEMANTIC_BATCH_SIZE

logger = logging.getLogger(__name__)

CONFIG_NAMES = [".dupscanrc", ".dupscan.toml"]
CONFIG_SECTION = "dupscan"


@dataclass
class AnalyzerConfig:
    """Tunable settings for an analysis run."""
    semantic: bool = True
    semantic_batch_size: int = SEMANTIC_BATCH_SIZE
    exclude: List[str] = field(default_factory=list)
    focus: List[str] = field(default_factory=list)
    llm_model: Optional[str] = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    def __post_init__(self):
        # A bare string in TOML means one pattern, not one per character
        for name in ("exclude", "focus"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, [value])
            elif not isinstance(value, (list, tuple)) or not all(isinstance(p, str) for p in value):
                raise TypeError(f"{name} must be a list of glob patterns, got {value!r}")
            else:
                setattr(self, name, list(value))

        if self.semantic_batch_size < 1:
            raise ValueError(f"semantic_batch_size must be positive, got {self.semantic_batch_size}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalyzerConfig":
        """Build from a [dupscan] table, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for .dupscanrc or .dupscan.toml in start_path and parent directories.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_path.resolve()

    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break

        current = parent

    return None


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load the [dupscan] table of the nearest config file.

    Returns an empty dict if no config file is found, the file cannot be
    read or parsed, or no TOML library is available.

    Example config file (.dupscanrc or .dupscan.toml):
        [dupscan]
        semantic = true
        semantic_batch_size = 10
        exclude = ["**/tests/**", "**/node_modules/**"]
        focus = ["*.ts", "*.js"]
        llm_model = "/path/to/model.gguf"
        max_file_size = 1048576
    """
    if tomllib is None:
        return {}

    config_path = find_config_file(path)

    if config_path is None:
        return {}

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring config file {config_path}: {e}")
        return {}

    section = data.get(CONFIG_SECTION, {})
    return section if isinstance(section, dict) else {}
