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
Language-specific block extraction.

Each language supplies regex tables for function and class start lines;
block ends come from the shared brace scanner. Unknown languages yield
no blocks.
"""

from pathlib import PurePath
from typing import List, Optional

from ..models import CodeBlock
from .base import BlockExtractor, find_block_end


# Language registry - maps language name to extractor class
_EXTRACTOR_REGISTRY: dict[str, type[BlockExtractor]] = {}

# Extension to language mapping
EXTENSION_MAP = {
    ".py": "python",
    ".pyw": "python",
    ".swift": "swift",
    ".rs": "rust",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".php": "php",
    ".cs": "csharp",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".sc": "scala",
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "bash",
}

SUPPORTED_LANGUAGES = set(EXTENSION_MAP.values())


def register_extractor(language: str, extractor_class: type[BlockExtractor]) -> None:
    """Register an extractor for a language."""
    _EXTRACTOR_REGISTRY[language.lower()] = extractor_class


def get_extractor(language: str) -> Optional[BlockExtractor]:
    """
    Get an extractor instance for the given language.

    Returns None for languages without a pattern table.
    """
    language = language.lower()

    if language in _EXTRACTOR_REGISTRY:
        return _EXTRACTOR_REGISTRY[language]()

    return _load_builtin_extractor(language)


def detect_language(file_path: str) -> str:
    """Detect language from file extension ("text" when unknown)."""
    ext = PurePath(file_path).suffix.lower()
    return EXTENSION_MAP.get(ext, "text")


def extract_blocks(content: str, language: str, file_path: str = "") -> List[CodeBlock]:
    """Extract function and class blocks from content in the given language."""
    extractor = get_extractor(language)
    if extractor is None:
        return []
    return extractor.extract(content, file_path)


def _load_builtin_extractor(language: str) -> Optional[BlockExtractor]:
    if language == "python":
        from .python import PythonExtractor
        return PythonExtractor()
    elif language in ("javascript", "typescript"):
        from .javascript import JavaScriptExtractor
        return JavaScriptExtractor()
    elif language == "java":
        from .java import JavaExtractor
        return JavaExtractor()
    elif language == "csharp":
        from .csharp import CSharpExtractor
        return CSharpExtractor()
    elif language == "go":
        from .go import GoExtractor
        return GoExtractor()
    elif language == "c":
        from .c import CExtractor
        return CExtractor()
    elif language == "cpp":
        from .cpp import CppExtractor
        return CppExtractor()
    elif language == "php":
        from .php import PHPExtractor
        return PHPExtractor()
    elif language == "kotlin":
        from .kotlin import KotlinExtractor
        return KotlinExtractor()
    elif language == "swift":
        from .swift import SwiftExtractor
        return SwiftExtractor()
    elif language == "scala":
        from .scala import ScalaExtractor
        return ScalaExtractor()
    elif language == "rust":
        from .rust import RustExtractor
        return RustExtractor()
    elif language == "bash":
        from .bash import BashExtractor
        return BashExtractor()

    return None


__all__ = [
    "BlockExtractor",
    "EXTENSION_MAP",
    "SUPPORTED_LANGUAGES",
    "detect_language",
    "extract_blocks",
    "find_block_end",
    "get_extractor",
    "register_extractor",
]
