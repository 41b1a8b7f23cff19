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
dupscan - Find duplicated and similar code across a project.

Blocks are pulled out of source files with per-language patterns, then
compared by hash, by token overlap and (optionally) by a local LLM judge.
Related matches are grouped into clusters ranked by refactoring priority.

No telemetry. Models cached locally after first download.
"""

__version__ = "0.1.0"

from .analyzer import CodeSimilarityAnalyzer, calculate_statistics
from .config import AnalyzerConfig, load_config, find_config_file
from .errors import AnalysisInProgressError, DupscanError, JudgeUnavailableError
from .file_access import LocalFileAccess
from .judge import LlamaJudge, SimilarityJudge
from .models import (
    CodeBlock,
    DuplicateCluster,
    EstimatedSavings,
    MatchType,
    RefactoringPriority,
    SimilarityMatch,
    SimilarityReport,
    SimilarityStatistics,
)
from .reporter import OutputFormat, report_similarity, report_matches

__all__ = [
    "__version__",
    "CodeSimilarityAnalyzer",
    "calculate_statistics",
    "AnalyzerConfig",
    "load_config",
    "find_config_file",
    "DupscanError",
    "AnalysisInProgressError",
    "JudgeUnavailableError",
    "LocalFileAccess",
    "LlamaJudge",
    "SimilarityJudge",
    "CodeBlock",
    "DuplicateCluster",
    "EstimatedSavings",
    "MatchType",
    "RefactoringPriority",
    "SimilarityMatch",
    "SimilarityReport",
    "SimilarityStatistics",
    "OutputFormat",
    "report_similarity",
    "report_matches",
]
