"""Tests for the topic set algebra."""

from __future__ import annotations

import pytest

from ghadmin.exceptions import InvalidArgumentError
from ghadmin.services.topics import combine_topics

CASES = [
    ([], []),
    (["python"], ["python"]),
    (["python", "cli"], ["web", ""]),
    (["a", "b", "c"], ["b", "d"]),
    ([], ["", "new"]),
]


class TestReplace:
    def test_returns_requested_unchanged(self):
        assert combine_topics(["old", "stale"], ["new", "fresh"], "replace") == ["new", "fresh"]

    def test_replace_with_empty_clears(self):
        assert combine_topics(["old"], [], "replace") == []


class TestAdd:
    def test_unions_and_deduplicates(self):
        assert combine_topics(["python", "cli"], ["cli", "web"], "add") == ["cli", "python", "web"]

    def test_drops_empty_strings(self):
        assert combine_topics(["python"], ["", "web"], "add") == ["python", "web"]

    @pytest.mark.parametrize("current,requested", CASES)
    def test_superset_of_inputs(self, current, requested):
        result = set(combine_topics(current, requested, "add"))
        assert result >= set(current)
        assert result >= set(requested) - {""}

    @pytest.mark.parametrize("current,requested", CASES)
    def test_idempotent(self, current, requested):
        once = combine_topics(current, requested, "add")
        assert combine_topics(once, requested, "add") == once


class TestRemove:
    def test_subtracts(self):
        assert combine_topics(["a", "b", "c"], ["b", "x"], "remove") == ["a", "c"]

    @pytest.mark.parametrize("current,requested", CASES)
    def test_disjoint_from_requested_and_subset_of_current(self, current, requested):
        result = set(combine_topics(current, requested, "remove"))
        assert not result & set(requested)
        assert result <= set(current)

    @pytest.mark.parametrize("current,requested", CASES)
    def test_idempotent(self, current, requested):
        once = combine_topics(current, requested, "remove")
        assert combine_topics(once, requested, "remove") == once


def test_invalid_mode_raises():
    with pytest.raises(InvalidArgumentError, match="invalid mode"):
        combine_topics(["a"], ["b"], "merge")
