"""Unit tests for auth/similarity.py -- near-duplicate username grouping."""

import pytest

from auth.similarity import are_similar, group_similar, similar_to, within_one_edit


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("john", "john", True),
        ("john", "johnn", True),  # insertion
        ("john", "jon", True),  # deletion
        ("john", "joan", True),  # substitution
        ("john", "jane", False),
        ("ab", "abcd", False),
        ("", "a", True),
        ("ab", "ba", False),
    ],
)
def test_within_one_edit(a, b, expected):
    assert within_one_edit(a, b) is expected
    assert within_one_edit(b, a) is expected


def test_case_only_difference_is_similar():
    assert are_similar("Alice", "alice")
    assert are_similar("ALICE", "alice1")


def test_group_similar_clusters_and_drops_singletons():
    groups = group_similar(["john", "johnn", "alice", "Alice", "bob"])
    assert groups == [["Alice", "alice"], ["john", "johnn"]]


def test_group_similar_chains_through_intermediate_names():
    assert group_similar(["ab", "abcd", "abc"]) == [["ab", "abc", "abcd"]]


def test_group_similar_empty():
    assert group_similar([]) == []


def test_similar_to_candidate():
    assert similar_to("Johnny", ["john", "johnny", "johnn", "mary"]) == ["johnn", "johnny"]
    assert similar_to("zed", ["john"]) == []
