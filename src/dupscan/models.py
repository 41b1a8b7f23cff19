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
Data models for dupscan.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Tuple, Dict, Any


class MatchType(str, Enum):
    """How a pair of blocks was found to be similar."""

    EXACT = "exact"
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    FUNCTIONAL = "functional"


class RefactoringPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class CodeBlock:
    """A contiguous line range believed to be a function, class or logical unit."""

    file_path: str           # Owning file
    start_line: int          # Starting line number (1-indexed)
    end_line: int            # Ending line number (inclusive)
    code: str                # The raw text
    hash: int                # Structural fingerprint of code
    tokens: Tuple[str, ...] = ()  # Lowercase identifier/keyword tokens

    @property
    def line_count(self) -> int:
        """Number of lines in this block."""
        return self.end_line - self.start_line + 1

    @property
    def location(self) -> str:
        """Human-readable location string."""
        return f"{self.file_path}:{self.start_line}-{self.end_line}"

    def preview(self, max_chars: int = 60) -> str:
        """Short preview of the first line."""
        first_line = self.code.split('\n')[0].strip()
        if len(first_line) > max_chars:
            return first_line[:max_chars-3] + "..."
        return first_line

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["tokens"] = list(self.tokens)
        return data


@dataclass
class SimilarityMatch:
    """A pairwise relationship between two code blocks."""

    id: str
    source_file: str
    target_file: str
    source_lines: Tuple[int, int]
    target_lines: Tuple[int, int]
    source_code: str
    target_code: str
    similarity_score: float
    match_type: MatchType
    confidence: float
    suggestions: List[str] = field(default_factory=list)
    refactoring_opportunity: bool = False

    @property
    def source_line_count(self) -> int:
        return self.source_lines[1] - self.source_lines[0] + 1

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source_lines"] = list(self.source_lines)
        data["target_lines"] = list(self.target_lines)
        data["match_type"] = self.match_type.value
        return data


@dataclass
class EstimatedSavings:
    lines_of_code: int = 0
    maintainability_improvement: int = 0


@dataclass
class DuplicateCluster:
    """A group of files/blocks sharing a common pattern."""

    id: str
    files: List[str]
    code_blocks: List[CodeBlock]
    common_pattern: str
    average_similarity: float
    refactoring_priority: RefactoringPriority
    estimated_savings: EstimatedSavings = field(default_factory=EstimatedSavings)

    @property
    def file_count(self) -> int:
        """Number of unique files."""
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "files": list(self.files),
            "code_blocks": [b.to_dict() for b in self.code_blocks],
            "common_pattern": self.common_pattern,
            "average_similarity": self.average_similarity,
            "refactoring_priority": self.refactoring_priority.value,
            "estimated_savings": asdict(self.estimated_savings),
        }


@dataclass
class SimilarityStatistics:
    exact_duplicates: int = 0
    structural_similar: int = 0
    semantic_similar: int = 0
    functional_similar: int = 0
    potential_savings: int = 0


@dataclass(frozen=True)
class SimilarityReport:
    """Result of one analysis run."""

    id: str
    project_path: str
    timestamp: float
    total_files: int
    total_matches: int
    duplicate_clusters: List[DuplicateCluster]
    similarity_matches: List[SimilarityMatch]
    statistics: SimilarityStatistics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_path": self.project_path,
            "timestamp": self.timestamp,
            "total_files": self.total_files,
            "total_matches": self.total_matches,
            "duplicate_clusters": [c.to_dict() for c in self.duplicate_clusters],
            "similarity_matches": [m.to_dict() for m in self.similarity_matches],
            "statistics": asdict(self.statistics),
        }
