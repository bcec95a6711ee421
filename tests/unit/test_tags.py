"""Tests for tag normalization and pair extraction."""

from __future__ import annotations

from lifemap.tags import connection_id, extract_pairs, normalize_tag, normalize_tags, sorted_pair


class TestNormalize:
    def test_trims_and_lowercases(self):
        assert normalize_tag("  Gym ") == "gym"

    def test_whitespace_only_is_empty(self):
        assert normalize_tag("   ") == ""

    def test_normalize_tags_dedupes_in_first_seen_order(self):
        """Duplicates collapse after normalization, empties are dropped."""
        assert normalize_tags(["Gym", "coffee", " gym", "", "  ", "COFFEE", "friends"]) == [
            "gym",
            "coffee",
            "friends",
        ]


class TestPairs:
    def test_sorted_pair_is_symmetric(self):
        assert sorted_pair("gym", "coffee") == sorted_pair("Coffee", "GYM") == ("coffee", "gym")

    def test_connection_id(self):
        assert connection_id("gym", "coffee") == "coffee_gym"

    def test_k_tags_yield_k_choose_2_pairs(self):
        """k distinct tags produce k*(k-1)/2 pairs."""
        for k in range(6):
            tags = [f"tag{i}" for i in range(k)]
            assert len(extract_pairs(tags)) == k * (k - 1) // 2

    def test_pairs_are_sorted(self):
        pairs = extract_pairs(["gym", "friends", "coffee"])
        assert set(pairs) == {("friends", "gym"), ("coffee", "gym"), ("coffee", "friends")}
        assert all(a < b for a, b in pairs)

    def test_duplicates_make_no_self_pair(self):
        assert extract_pairs(["gym", "Gym", " gym"]) == []

    def test_single_tag_has_no_pairs(self):
        assert extract_pairs(["gym"]) == []
