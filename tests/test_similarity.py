"""Tests for the exact, structural and semantic similarity passes."""

import json
import logging

import pytest

from conftest import FakeJudge, SUM_COSTS, SUM_PRICES, make_block
from dupscan.models import MatchType
from dupscan.similarity import (
    compare_blocks,
    find_exact_duplicates,
    find_semantic_similarities,
    find_structural_similarities,
    group_by_hash,
)


def verdict(similarity, match_type="semantic", confidence=0.9, suggestions=None):
    return json.dumps({
        "similarity": similarity,
        "type": match_type,
        "confidence": confidence,
        "reasoning": "both loop and accumulate",
        "suggestions": suggestions or ["Extract a helper"],
    })


class TestExactPass:
    def test_pair_in_different_files(self):
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_PRICES)]
        matches = find_exact_duplicates(blocks)

        assert len(matches) == 1
        match = matches[0]
        assert match.match_type == MatchType.EXACT
        assert match.similarity_score == 1.0
        assert match.confidence == 1.0
        assert match.refactoring_opportunity is True
        assert match.id == "exact-a.ts-1-b.ts-1"
        assert match.source_lines == (1, 7)

    def test_same_file_duplicates_are_reported(self):
        blocks = [make_block("a.ts", SUM_PRICES, 1), make_block("a.ts", SUM_PRICES, 20)]
        matches = find_exact_duplicates(blocks)
        assert len(matches) == 1
        assert matches[0].source_file == matches[0].target_file == "a.ts"

    def test_group_of_three_gives_three_pairs(self):
        blocks = [make_block(f"{name}.ts", SUM_PRICES) for name in "abc"]
        assert len(find_exact_duplicates(blocks)) == 3

    def test_group_by_hash_keeps_order(self):
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS),
                  make_block("c.ts", SUM_PRICES)]
        groups = group_by_hash(blocks)
        assert [b.file_path for b in groups[blocks[0].hash]] == ["a.ts", "c.ts"]


class TestStructuralPass:
    def test_renamed_clone(self):
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        matches = find_structural_similarities(blocks)

        assert len(matches) == 1
        match = matches[0]
        assert match.match_type == MatchType.STRUCTURAL
        assert match.similarity_score == pytest.approx(11 / 13)
        assert match.confidence == pytest.approx(11 / 13 * 0.9)
        assert match.refactoring_opportunity is True
        assert match.id.startswith("structural-")

    def test_skips_same_file_pairs(self):
        blocks = [make_block("a.ts", SUM_PRICES, 1), make_block("a.ts", SUM_COSTS, 20)]
        assert find_structural_similarities(blocks) == []

    def test_identical_blocks_also_match_structurally(self):
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_PRICES)]
        matches = find_structural_similarities(blocks)
        assert [m.similarity_score for m in matches] == [1.0]

    def test_below_threshold(self):
        blocks = [
            make_block("a.ts", "function alpha() {\n  console.log(one);\n}"),
            make_block("b.ts", "function beta() {\n  console.log(two);\n}"),
        ]
        # {function, console, log} shared out of 7
        assert find_structural_similarities(blocks) == []


class TestSemanticPass:
    def test_no_judge_skips_pass(self):
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        assert find_semantic_similarities(blocks, None) == []

    def test_functional_verdict(self):
        judge = FakeJudge(verdict(0.85, "functional", suggestions=["Merge them"]))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]

        matches = find_semantic_similarities(blocks, judge)

        assert len(matches) == 1
        match = matches[0]
        assert match.match_type == MatchType.FUNCTIONAL
        assert match.similarity_score == 0.85
        assert match.confidence == 0.9
        assert match.suggestions == ["Merge them"]
        assert match.refactoring_opportunity is True
        assert "sumPrices" in judge.prompts[0] and "sumCosts" in judge.prompts[0]

    def test_other_types_are_semantic(self):
        judge = FakeJudge(verdict(0.65, "algorithmic"))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]

        [match] = find_semantic_similarities(blocks, judge)
        assert match.match_type == MatchType.SEMANTIC
        assert match.refactoring_opportunity is False

    def test_low_similarity_dropped(self):
        judge = FakeJudge(verdict(0.59))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        assert find_semantic_similarities(blocks, judge) == []

    def test_unparseable_answer_dropped(self):
        judge = FakeJudge("I think they are pretty similar!")
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        assert find_semantic_similarities(blocks, judge) == []

    def test_exact_duplicates_excluded(self):
        judge = FakeJudge(verdict(0.9))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_PRICES)]

        assert find_semantic_similarities(blocks, judge) == []
        assert judge.prompts == []

    def test_same_file_pairs_not_judged(self):
        judge = FakeJudge(verdict(0.9))
        blocks = [make_block("a.ts", SUM_PRICES, 1), make_block("a.ts", SUM_COSTS, 20)]

        assert find_semantic_similarities(blocks, judge) == []
        assert judge.prompts == []

    def test_judge_errors_are_logged_and_skipped(self, caplog):
        judge = FakeJudge(error=RuntimeError("model crashed"))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]

        with caplog.at_level(logging.WARNING):
            assert find_semantic_similarities(blocks, judge) == []
        assert "model crashed" in caplog.text

    def test_deeply_nested_answer_dropped(self):
        judge = FakeJudge('{"similarity": ' + "[" * 100000 + "]" * 100000 + "}")
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        assert find_semantic_similarities(blocks, judge) == []

    def test_non_text_answer_dropped(self):
        judge = FakeJudge(lambda prompt: 0.9)
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]
        assert find_semantic_similarities(blocks, judge) == []

    def test_parse_errors_are_logged_and_skipped(self, monkeypatch, caplog):
        def explode(output):
            raise KeyError("similarity")

        monkeypatch.setattr("dupscan.similarity.parse_similarity_response", explode)
        judge = FakeJudge(verdict(0.9))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]

        with caplog.at_level(logging.WARNING):
            assert find_semantic_similarities(blocks, judge) == []
        assert "Failed to analyze semantic similarity" in caplog.text

    def test_reasoning_logged_at_debug(self, caplog):
        judge = FakeJudge(verdict(0.9))
        blocks = [make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS)]

        with caplog.at_level(logging.DEBUG, logger="dupscan.similarity"):
            find_semantic_similarities(blocks, judge)
        assert "both loop and accumulate" in caplog.text

    def test_only_pairs_within_a_batch(self):
        judge = FakeJudge(verdict(0.9))
        blocks = [make_block(f"f{i}.ts", f"function f{i}() {{\n  return {i};\n}}")
                  for i in range(4)]

        matches = find_semantic_similarities(blocks, judge, batch_size=2)

        # (f0, f1) and (f2, f3) only
        assert len(judge.prompts) == 2
        assert {(m.source_file, m.target_file) for m in matches} == {
            ("f0.ts", "f1.ts"), ("f2.ts", "f3.ts"),
        }

    def test_in_flight_calls_bounded_by_batch_size(self):
        judge = FakeJudge(verdict(0.1), delay=0.02)
        blocks = [make_block(f"f{i}.ts", f"function f{i}() {{\n  return {i};\n}}")
                  for i in range(9)]

        find_semantic_similarities(blocks, judge, batch_size=3)

        # three batches of three blocks, three pairs each
        assert len(judge.prompts) == 9
        assert judge.max_in_flight <= 3

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            find_semantic_similarities([], FakeJudge(), batch_size=0)


class TestCompareBlocks:
    def test_exact(self):
        match = compare_blocks(make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_PRICES))
        assert match.match_type == MatchType.EXACT
        assert match.suggestions == ["Exact duplicate found"]
        assert match.id == "a.ts-1-b.ts-1"

    def test_high_structural(self):
        match = compare_blocks(make_block("a.ts", SUM_PRICES), make_block("b.ts", SUM_COSTS))
        assert match.match_type == MatchType.STRUCTURAL
        assert match.confidence == pytest.approx(11 / 13 * 0.8)
        assert match.suggestions == ["High structural similarity"]

    def test_moderate(self):
        match = compare_blocks(
            make_block("a.ts", "function alpha() {\n  console.log(one);\n}"),
            make_block("b.ts", "function beta() {\n  console.log(two);\n}"),
        )
        assert match.similarity_score == pytest.approx(3 / 7)
        assert match.suggestions == ["Moderate similarity"]
