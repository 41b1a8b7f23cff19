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
Duplicate clusterer - groups pairwise matches into refactoring units.

Greedy single pass with one-hop expansion: a cluster takes every
remaining match that touches one of its seed match's two files. Files
pulled in that way do not expand the cluster further, so long chains
of shared files can end up split over several clusters.
"""

from typing import List, Optional, Sequence
import logging
import uuid

from .hashing import calculate_hash, tokenize
from .judge import SimilarityJudge, build_pattern_prompt
from .models import (
    CodeBlock,
    DuplicateCluster,
    EstimatedSavings,
    RefactoringPriority,
    SimilarityMatch,
)

logger = logging.getLogger(__name__)


FALLBACK_PATTERN = "Similar code structure"
EMPTY_PATTERN = "Common pattern detected"

# Share of duplicated lines expected to disappear after extraction
LINE_REDUCTION = 0.7
MAINTAINABILITY_PER_MATCH = 10


def cluster_matches(
    matches: Sequence[SimilarityMatch],
    judge: Optional[SimilarityJudge] = None,
) -> List[DuplicateCluster]:
    """
    Group matches into duplicate clusters.

    Args:
        matches: All matches of one run, in pass order
        judge: Optional judge used to describe each cluster's pattern

    Returns:
        List of DuplicateCluster objects, highest average similarity first
    """
    clusters = []
    processed: set = set()

    for index, match in enumerate(matches):
        if index in processed:
            continue

        seed_files = {match.source_file, match.target_file}
        files = _unique([match.source_file, match.target_file])
        absorbed = []

        # The seed itself qualifies, so it is always absorbed first
        for other_index in range(index, len(matches)):
            if other_index in processed:
                continue
            other = matches[other_index]
            if other.source_file in seed_files or other.target_file in seed_files:
                absorbed.append(other)
                processed.add(other_index)
                for path in (other.source_file, other.target_file):
                    if path not in files:
                        files.append(path)

        clusters.append(DuplicateCluster(
            id=f"cluster-{uuid.uuid4().hex[:12]}",
            files=files,
            code_blocks=_seed_blocks(match),
            common_pattern=extract_common_pattern([match.source_code, match.target_code], judge),
            average_similarity=sum(m.similarity_score for m in absorbed) / len(absorbed),
            refactoring_priority=calculate_refactoring_priority(match.similarity_score),
            estimated_savings=calculate_estimated_savings(absorbed),
        ))

    # Stable sort keeps discovery order among equal scores
    clusters.sort(key=lambda c: c.average_similarity, reverse=True)
    return clusters


def calculate_refactoring_priority(score: float) -> RefactoringPriority:
    if score >= 0.9:
        return RefactoringPriority.HIGH
    if score >= 0.7:
        return RefactoringPriority.MEDIUM
    return RefactoringPriority.LOW


def calculate_estimated_savings(matches: Sequence[SimilarityMatch]) -> EstimatedSavings:
    """70% of the duplicated source lines, plus a flat score per match."""
    total_lines = sum(m.source_line_count for m in matches)
    return EstimatedSavings(
        lines_of_code=int(total_lines * LINE_REDUCTION),
        maintainability_improvement=len(matches) * MAINTAINABILITY_PER_MATCH,
    )


def extract_common_pattern(codes: Sequence[str], judge: Optional[SimilarityJudge] = None) -> str:
    """Ask the judge what the blocks share; falls back to a fixed description."""
    if judge is None:
        return FALLBACK_PATTERN

    try:
        answer = (judge.ask(build_pattern_prompt(codes)) or "").strip()
    except Exception as e:
        logger.warning(f"Pattern extraction failed: {e}")
        return FALLBACK_PATTERN

    return answer or EMPTY_PATTERN


def _seed_blocks(match: SimilarityMatch) -> List[CodeBlock]:
    return [
        CodeBlock(
            file_path=match.source_file,
            start_line=match.source_lines[0],
            end_line=match.source_lines[1],
            code=match.source_code,
            hash=calculate_hash(match.source_code),
            tokens=tuple(tokenize(match.source_code)),
        ),
        CodeBlock(
            file_path=match.target_file,
            start_line=match.target_lines[0],
            end_line=match.target_lines[1],
            code=match.target_code,
            hash=calculate_hash(match.target_code),
            tokens=tuple(tokenize(match.target_code)),
        ),
    ]


def _unique(paths: List[str]) -> List[str]:
    seen = []
    for path in paths:
        if path not in seen:
            seen.append(path)
    return seen
