"""
Tests for follower / followee set algebra.
"""

from follow_ranker.graph import (
    follower_diff,
    mutuals,
    partition,
    sorted_identities,
    watchers,
    watching,
)


class TestCategories:
    """Tests for the three relationship categories."""

    def test_basic_partition(self):
        """Test the documented example."""
        followers = {"alice", "bob", "carol"}
        followees = {"bob", "dave"}

        assert mutuals(followers, followees) == {"bob"}
        assert watching(followers, followees) == {"dave"}
        assert watchers(followers, followees) == {"alice", "carol"}

    def test_partition_matches_individual_functions(self):
        """Test partition() agrees with the single-category functions."""
        followers = ["a", "b", "c", "d"]
        followees = ["c", "d", "e"]
        groups = partition(followers, followees)

        assert groups.mutuals == mutuals(followers, followees)
        assert groups.watching == watching(followers, followees)
        assert groups.watchers == watchers(followers, followees)

    def test_categories_are_disjoint_and_cover(self):
        """Test mutuals + watching = followees and mutuals + watchers = followers."""
        followers = {"a", "b", "c", "x"}
        followees = {"b", "c", "y", "z"}
        groups = partition(followers, followees)

        assert groups.mutuals | groups.watching == followees
        assert groups.mutuals | groups.watchers == followers
        assert not groups.mutuals & groups.watching
        assert not groups.mutuals & groups.watchers
        assert not groups.watching & groups.watchers

    def test_empty_inputs(self):
        """Test empty sets produce empty categories."""
        groups = partition([], [])

        assert groups.mutuals == frozenset()
        assert groups.watching == frozenset()
        assert groups.watchers == frozenset()

    def test_duplicates_ignored(self):
        """Test duplicate identities in input do not change the result."""
        groups = partition(["a", "a", "b"], ["b", "b", "c"])

        assert groups.mutuals == {"b"}
        assert groups.watching == {"c"}
        assert groups.watchers == {"a"}

    def test_identities_are_case_sensitive(self):
        """Test identities are compared verbatim."""
        groups = partition(["Octocat"], ["octocat"])

        assert groups.mutuals == frozenset()
        assert groups.watching == {"octocat"}
        assert groups.watchers == {"Octocat"}

    def test_inputs_not_mutated(self):
        """Test inputs are left as given."""
        followers = {"a", "b"}
        followees = {"b", "c"}
        partition(followers, followees)

        assert followers == {"a", "b"}
        assert followees == {"b", "c"}


class TestFollowerDiff:
    """Tests for follower change detection."""

    def test_gained_and_lost(self):
        """Test followers gained and lost between snapshots."""
        diff = follower_diff({"a", "b"}, {"b", "c"})

        assert diff.gained == {"c"}
        assert diff.lost == {"a"}
        assert not diff.is_empty

    def test_no_change(self):
        """Test identical snapshots produce an empty diff."""
        diff = follower_diff(["a", "b"], ["b", "a"])

        assert diff.is_empty


class TestSortedIdentities:
    """Tests for deterministic ordering."""

    def test_sorted(self):
        """Test identities are sorted lexicographically."""
        assert sorted_identities({"carol", "alice", "bob"}) == ["alice", "bob", "carol"]
