"""Set difference primitive tests."""

from __future__ import annotations

from simsmods.reconcile import SetDiff


def test_between_partitions_both_sides() -> None:
    diff = SetDiff.between({1, 2, 3}, {2, 3, 4})

    assert diff.added == frozenset({4})
    assert diff.removed == frozenset({1})
    assert diff.common == frozenset({2, 3})
    assert not diff.unchanged


def test_identical_sets_are_unchanged() -> None:
    diff = SetDiff.between(["a", "b"], ["b", "a"])

    assert diff.unchanged
    assert diff.common == frozenset({"a", "b"})


def test_apply_reaches_target() -> None:
    baseline = {"x", "y"}
    target = {"y", "z"}

    assert SetDiff.between(baseline, target).apply(baseline) == target
