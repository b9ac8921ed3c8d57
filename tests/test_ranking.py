"""
Tests for the frequency ranking primitive.
"""

from yam_library.ranking import TagCounter, most_frequent, top_n


class TestMostFrequent:
    def test_descending_frequency(self):
        assert most_frequent(["a", "b", "a", "c", "b", "a"], 2) == ["a", "b"]

    def test_ties_keep_first_occurrence_order(self):
        assert most_frequent(["c", "b", "a", "a", "b", "c"], 3) == ["c", "b", "a"]

    def test_n_larger_than_distinct(self):
        assert most_frequent(["x", "y", "x"], 10) == ["x", "y"]

    def test_empty_and_non_positive(self):
        assert most_frequent([], 5) == []
        assert most_frequent(["a"], 0) == []
        assert most_frequent(["a"], -1) == []

    def test_accepts_generators(self):
        assert most_frequent((tag for tag in "abracadabra"), 1) == ["a"]

    def test_top_n_alias(self):
        assert top_n(["a", "b", "b"], 1) == ["b"]


class TestTagCounter:
    def test_counts(self):
        counter = TagCounter(["3dcg", "sandbox", "3dcg"])
        counter.update(["sandbox", "sandbox"])
        assert counter.count("3dcg") == 2
        assert counter.count("sandbox") == 3
        assert counter.count("missing") == 0
        assert "3dcg" in counter
        assert len(counter) == 2

    def test_most_common_after_updates(self):
        counter = TagCounter(["b", "a"])
        counter.update(["a"])
        assert counter.most_common(2) == ["a", "b"]
