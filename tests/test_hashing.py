"""Tests for block hashing, tokenizing and Jaccard similarity."""

from dupscan.hashing import calculate_hash, jaccard_similarity, tokenize


class TestCalculateHash:
    def test_deterministic(self):
        code = "function f() { return 1; }"
        assert calculate_hash(code) == calculate_hash(code)

    def test_empty_string_is_zero(self):
        assert calculate_hash("") == 0

    def test_small_input(self):
        # 'a' * 31 + 'b'
        assert calculate_hash("ab") == 97 * 31 + 98

    def test_fits_signed_32_bits(self):
        h = calculate_hash("x" * 500)
        assert -(2 ** 31) <= h < 2 ** 31

    def test_whitespace_changes_hash(self):
        assert calculate_hash("a b") != calculate_hash("a  b")


class TestTokenize:
    def test_splits_on_punctuation_and_lowercases(self):
        assert tokenize("Foo.barBaz(QUX)") == ["foo", "barbaz", "qux"]

    def test_drops_single_characters(self):
        assert tokenize("a = b + cd") == ["cd"]

    def test_keeps_duplicates_and_order(self):
        assert tokenize("total += total") == ["total", "total"]

    def test_underscores_are_word_characters(self):
        assert tokenize("my_var = 10") == ["my_var", "10"]


class TestJaccard:
    def test_identical(self):
        assert jaccard_similarity(["a1", "b2"], ["b2", "a1"]) == 1.0

    def test_disjoint(self):
        assert jaccard_similarity(["a1"], ["b2"]) == 0.0

    def test_both_empty(self):
        assert jaccard_similarity([], []) == 0.0

    def test_ignores_multiplicity(self):
        assert jaccard_similarity(["x1", "x1", "y1"], ["x1", "y1"]) == 1.0

    def test_symmetric(self):
        a = ["one", "two", "three"]
        b = ["two", "three", "four", "five"]
        assert jaccard_similarity(a, b) == jaccard_similarity(b, a) == 2 / 5
