"""Tests for grouping matches into duplicate clusters."""

import logging

import pytest

from conftest import FakeJudge, SUM_COSTS, SUM_PRICES
from dupscan.clusterer import (
    EMPTY_PATTERN,
    FALLBACK_PATTERN,
    calculate_estimated_savings,
    calculate_refactoring_priority,
    cluster_matches,
    extract_common_pattern,
)
from dupscan.models import MatchType, RefactoringPriority, SimilarityMatch


def match(source, target, score, lines=(1, 10), match_type=MatchType.STRUCTURAL):
    return SimilarityMatch(
        id=f"{source}-{target}",
        source_file=source,
        target_file=target,
        source_lines=lines,
        target_lines=lines,
        source_code=SUM_PRICES,
        target_code=SUM_COSTS,
        similarity_score=score,
        match_type=match_type,
        confidence=score,
    )


class TestRefactoringPriority:
    @pytest.mark.parametrize("score,priority", [
        (1.0, RefactoringPriority.HIGH),
        (0.9, RefactoringPriority.HIGH),
        (0.89, RefactoringPriority.MEDIUM),
        (0.7, RefactoringPriority.MEDIUM),
        (0.69, RefactoringPriority.LOW),
    ])
    def test_thresholds(self, score, priority):
        assert calculate_refactoring_priority(score) == priority


class TestEstimatedSavings:
    def test_seventy_percent_of_source_lines(self):
        savings = calculate_estimated_savings([
            match("a", "b", 1.0, lines=(1, 10)),
            match("a", "c", 1.0, lines=(5, 9)),
        ])
        assert savings.lines_of_code == int(15 * 0.7)
        assert savings.maintainability_improvement == 20

    def test_empty(self):
        savings = calculate_estimated_savings([])
        assert savings.lines_of_code == 0
        assert savings.maintainability_improvement == 0


class TestClusterMatches:
    def test_no_matches(self):
        assert cluster_matches([]) == []

    def test_one_match_one_cluster(self):
        [cluster] = cluster_matches([match("a.ts", "b.ts", 0.95)])

        assert cluster.files == ["a.ts", "b.ts"]
        assert len(cluster.code_blocks) == 2
        assert cluster.code_blocks[0].code == SUM_PRICES
        assert cluster.code_blocks[1].file_path == "b.ts"
        assert cluster.average_similarity == 0.95
        assert cluster.refactoring_priority == RefactoringPriority.HIGH
        assert cluster.common_pattern == FALLBACK_PATTERN
        assert cluster.id.startswith("cluster-")

    def test_absorbs_matches_touching_seed_files(self):
        clusters = cluster_matches([
            match("a", "b", 1.0),
            match("b", "c", 0.8),
            match("d", "e", 0.75),
        ])

        assert len(clusters) == 2
        first, second = clusters
        assert first.files == ["a", "b", "c"]
        assert first.average_similarity == pytest.approx(0.9)
        assert first.estimated_savings.maintainability_improvement == 20
        assert second.files == ["d", "e"]

    def test_one_hop_only(self):
        # c-d touches neither a nor b, even though b-c joined the first cluster
        clusters = cluster_matches([
            match("a", "b", 0.9),
            match("b", "c", 0.9),
            match("c", "d", 0.9),
        ])
        assert [c.files for c in clusters] == [["a", "b", "c"], ["c", "d"]]

    def test_every_match_in_exactly_one_cluster(self):
        matches = [match("a", "b", 0.9), match("c", "d", 0.8), match("b", "d", 0.7)]
        clusters = cluster_matches(matches)
        total = sum(c.estimated_savings.maintainability_improvement for c in clusters)
        assert total == len(matches) * 10

    def test_priority_from_seed_score(self):
        [cluster] = cluster_matches([match("a", "b", 0.75), match("a", "c", 1.0)])
        assert cluster.refactoring_priority == RefactoringPriority.MEDIUM
        assert cluster.average_similarity == pytest.approx(0.875)

    def test_sorted_by_average_similarity(self):
        clusters = cluster_matches([match("a", "b", 0.7), match("c", "d", 0.95)])
        assert [c.average_similarity for c in clusters] == [0.95, 0.7]

    def test_judge_describes_pattern(self):
        judge = FakeJudge("Sums price times quantity over a list")
        [cluster] = cluster_matches([match("a", "b", 0.9)], judge)

        assert cluster.common_pattern == "Sums price times quantity over a list"
        assert "sumPrices" in judge.prompts[0]


class TestExtractCommonPattern:
    def test_without_judge(self):
        assert extract_common_pattern(["a", "b"]) == FALLBACK_PATTERN

    def test_empty_answer(self):
        assert extract_common_pattern(["a", "b"], FakeJudge("   ")) == EMPTY_PATTERN

    def test_non_text_answer_falls_back(self, caplog):
        judge = FakeJudge(lambda prompt: 0.9)
        with caplog.at_level(logging.WARNING):
            assert extract_common_pattern(["a", "b"], judge) == FALLBACK_PATTERN
        assert "Pattern extraction failed" in caplog.text

    def test_judge_failure_falls_back(self, caplog):
        judge = FakeJudge(error=TimeoutError("too slow"))
        with caplog.at_level(logging.WARNING):
            assert extract_common_pattern(["a", "b"], judge) == FALLBACK_PATTERN
        assert "too slow" in caplog.text
