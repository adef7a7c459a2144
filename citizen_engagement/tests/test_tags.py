# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for tag set operations.
"""

import pytest

from citizen_engagement.domain.tags import (
    normalize_tags, union_tags, difference_tags, replace_tags
)


class TestNormalizeTags:
    """Test duplicate handling."""

    def test_duplicates_collapse_keeping_first_seen_order(self):
        """Test duplicates are dropped and first occurrences kept in place."""
        assert normalize_tags(["b", "a", "b", "c", "a"]) == ("b", "a", "c")

    def test_empty(self):
        assert normalize_tags([]) == ()


class TestUnionTags:
    """Test addTags semantics."""

    def test_union_adds_missing_tags(self):
        """Test union appends only the tags not yet present."""
        assert union_tags(["a", "b"], ["b", "c"]) == ("a", "b", "c")

    def test_union_is_idempotent(self):
        """Test adding the same tags twice leaves the set unchanged."""
        once = union_tags(["a"], ["b", "c"])
        twice = union_tags(once, ["b", "c"])

        assert set(once) == set(twice) == {"a", "b", "c"}

    @pytest.mark.parametrize("current,incoming", [
        (["a", "b"], ["c"]),
        (["x"], ["y", "x", "z"]),
        ([], ["a", "a"]),
    ])
    def test_union_matches_set_algebra(self, current, incoming):
        """Test union agrees with the set union of its inputs."""
        result = union_tags(current, incoming)

        assert set(result) == set(current) | set(incoming)
        assert len(result) == len(set(result))


class TestDifferenceTags:
    """Test removeTags semantics."""

    def test_difference_removes_listed_tags(self):
        assert difference_tags(["a", "b", "c"], ["b"]) == ("a", "c")

    def test_removing_absent_tag_is_noop(self):
        """Test removing a tag that is not present changes nothing."""
        assert difference_tags(["a", "b"], ["z"]) == ("a", "b")

    def test_difference_is_idempotent(self):
        once = difference_tags(["a", "b", "c"], ["a"])
        assert difference_tags(once, ["a"]) == once


class TestReplaceTags:
    """Test replaceTags semantics."""

    def test_replace_discards_current_tags(self):
        assert replace_tags(["a", "b"], ["c", "d", "c"]) == ("c", "d")

    def test_replace_with_empty_clears(self):
        assert replace_tags(["a"], []) == ()
