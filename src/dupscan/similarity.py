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
Similarity passes - exact, structural and semantic.

Each pass takes the full block collection and returns its own list of
SimilarityMatch records. The analyzer concatenates them in that order.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from .hashing import jaccard_similarity
from .judge import SimilarityJudge, build_similarity_prompt, parse_similarity_response
from .models import CodeBlock, MatchType, SimilarityMatch

logger = logging.getLogger(__name__)


STRUCTURAL_THRESHOLD = 0.7
SEMANTIC_THRESHOLD = 0.6
REFACTORING_THRESHOLD = 0.8
COMPARE_THRESHOLD = 0.7

# Token overlap is a weaker signal than identity
STRUCTURAL_CONFIDENCE_FACTOR = 0.9
COMPARE_CONFIDENCE_FACTOR = 0.8

SEMANTIC_BATCH_SIZE = 10


def make_match(
    block1: CodeBlock,
    block2: CodeBlock,
    score: float,
    match_type: MatchType,
    confidence: float,
    suggestions: List[str],
    prefix: str = "",
) -> SimilarityMatch:
    """Build a match, copying line ranges and code out of both blocks."""
    match_id = f"{block1.file_path}-{block1.start_line}-{block2.file_path}-{block2.start_line}"
    if prefix:
        match_id = f"{prefix}-{match_id}"

    return SimilarityMatch(
        id=match_id,
        source_file=block1.file_path,
        target_file=block2.file_path,
        source_lines=(block1.start_line, block1.end_line),
        target_lines=(block2.start_line, block2.end_line),
        source_code=block1.code,
        target_code=block2.code,
        similarity_score=score,
        match_type=match_type,
        confidence=confidence,
        suggestions=list(suggestions),
        refactoring_opportunity=score >= REFACTORING_THRESHOLD,
    )


def group_by_hash(blocks: Sequence[CodeBlock]) -> Dict[int, List[CodeBlock]]:
    """Group blocks by structural hash, keeping first-seen order."""
    groups: Dict[int, List[CodeBlock]] = {}
    for block in blocks:
        groups.setdefault(block.hash, []).append(block)
    return groups


def find_exact_duplicates(blocks: Sequence[CodeBlock]) -> List[SimilarityMatch]:
    """One match per unordered pair of blocks sharing a hash."""
    matches = []

    for group in group_by_hash(blocks).values():
        if len(group) < 2:
            continue
        for i in range(len(group)):
            for j in range(i + 1, len(group)):
                matches.append(make_match(
                    group[i], group[j],
                    score=1.0,
                    match_type=MatchType.EXACT,
                    confidence=1.0,
                    suggestions=["Consider extracting to a shared function or module"],
                    prefix="exact",
                ))

    return matches


def find_structural_similarities(blocks: Sequence[CodeBlock]) -> List[SimilarityMatch]:
    """Token-set Jaccard over every cross-file pair of blocks."""
    matches = []
    token_sets = [set(b.tokens) for b in blocks]

    for i in range(len(blocks)):
        for j in range(i + 1, len(blocks)):
            block1 = blocks[i]
            block2 = blocks[j]
            if block1.file_path == block2.file_path:
                continue

            similarity = jaccard_similarity(token_sets[i], token_sets[j])
            if similarity < STRUCTURAL_THRESHOLD:
                continue

            matches.append(make_match(
                block1, block2,
                score=similarity,
                match_type=MatchType.STRUCTURAL,
                confidence=similarity * STRUCTURAL_CONFIDENCE_FACTOR,
                suggestions=[
                    "Similar code structure detected",
                    "Consider refactoring common patterns",
                ],
                prefix="structural",
            ))

    return matches


def find_semantic_similarities(
    blocks: Sequence[CodeBlock],
    judge: Optional[SimilarityJudge],
    batch_size: int = SEMANTIC_BATCH_SIZE,
) -> List[SimilarityMatch]:
    """
    Ask the judge about blocks that have no exact duplicate.

    Blocks are taken in consecutive batches of batch_size and every
    cross-file pair inside a batch is judged. A batch's calls run on a
    pool of batch_size threads and the next batch waits for them, so at
    most batch_size judgments are in flight.

    Args:
        blocks: All extracted blocks
        judge: Semantic judge, or None to skip the pass
        batch_size: Blocks per batch and maximum concurrent calls

    Returns:
        Matches scoring at least SEMANTIC_THRESHOLD
    """
    if judge is None:
        return []
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    duplicated = {h for h, group in group_by_hash(blocks).items() if len(group) > 1}
    candidates = [b for b in blocks if b.hash not in duplicated]

    matches: List[SimilarityMatch] = []
    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for start in range(0, len(candidates), batch_size):
            batch = candidates[start:start + batch_size]
            pairs = _cross_file_pairs(batch)
            if not pairs:
                continue

            logger.debug(f"Judging {len(pairs)} pairs in batch {start // batch_size + 1}")
            results = executor.map(lambda pair: _judge_pair(judge, *pair), pairs)
            matches.extend(m for m in results if m is not None)

    return matches


def _cross_file_pairs(batch: Sequence[CodeBlock]) -> List[Tuple[CodeBlock, CodeBlock]]:
    pairs = []
    for i in range(len(batch)):
        for j in range(i + 1, len(batch)):
            if batch[i].file_path != batch[j].file_path:
                pairs.append((batch[i], batch[j]))
    return pairs


def _judge_pair(
    judge: SimilarityJudge,
    block1: CodeBlock,
    block2: CodeBlock,
) -> Optional[SimilarityMatch]:
    """Run one judgment; failures and malformed answers count as no match."""
    try:
        output = judge.ask(build_similarity_prompt(block1, block2))
        result = parse_similarity_response(output)
    except Exception as e:
        logger.warning(f"Failed to analyze semantic similarity of {block1.location} and {block2.location}: {e}")
        return None

    if result.similarity < SEMANTIC_THRESHOLD:
        return None

    if result.reasoning:
        logger.debug(f"{block1.location} ~ {block2.location}: {result.reasoning}")

    match_type = MatchType.FUNCTIONAL if result.type == "functional" else MatchType.SEMANTIC
    return make_match(
        block1, block2,
        score=result.similarity,
        match_type=match_type,
        confidence=result.confidence,
        suggestions=result.suggestions,
        prefix="semantic",
    )


def compare_blocks(block1: CodeBlock, block2: CodeBlock) -> SimilarityMatch:
    """
    Direct comparison used for two-file comparisons.

    Equal hashes are an exact match; anything else is scored by token
    overlap. The judge is never consulted.
    """
    if block1.hash == block2.hash:
        return make_match(
            block1, block2,
            score=1.0,
            match_type=MatchType.EXACT,
            confidence=1.0,
            suggestions=["Exact duplicate found"],
        )

    similarity = jaccard_similarity(block1.tokens, block2.tokens)
    if similarity > REFACTORING_THRESHOLD:
        suggestions = ["High structural similarity"]
    else:
        suggestions = ["Moderate similarity"]

    return make_match(
        block1, block2,
        score=similarity,
        match_type=MatchType.STRUCTURAL,
        confidence=similarity * COMPARE_CONFIDENCE_FACTOR,
        suggestions=suggestions,
    )
