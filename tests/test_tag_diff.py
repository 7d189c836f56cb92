"""Tag-diff engine tests."""

from __future__ import annotations

import pytest
from support import add_mod

from simsmods.reconcile import compute_tag_delta, retag_members
from simsmods.reconcile.tags import normalize_tags, parse_tag_list, replace_mod_tags
from simsmods.store import ModStore, queries


def test_compute_tag_delta_links_and_unlinks_minimum() -> None:
    delta = compute_tag_delta({1, 2, 3}, {2, 3, 4})

    assert delta.to_link == frozenset({4})
    assert delta.to_unlink == frozenset({1})
    assert not delta.is_empty


def test_compute_tag_delta_same_selection_is_empty() -> None:
    assert compute_tag_delta([5, 6], {6, 5}).is_empty


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (set(), set()),
        (set(), {1, 2}),
        ({1, 2}, set()),
        ({1, 2}, {3, 4}),
        ({1, 2, 3}, {3, 4}),
        ({1, 2}, {1, 2, 3}),
    ],
)
def test_compute_tag_delta_reaches_target(current: set[int], target: set[int]) -> None:
    delta = compute_tag_delta(current, target)

    assert not delta.to_link & delta.to_unlink
    assert (current | delta.to_link) - delta.to_unlink == target
    assert delta.is_empty == (current == target)


def test_retag_members_applies_delta(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    beta = add_mod(store, "Beta", tags=["Body"])
    gamma = add_mod(store, "Gamma")
    with store.session() as session:
        tag_id = queries.require_tag(session, "Body").id
        before = queries.get_mod(session, gamma).updated

    result = retag_members(store, tag_id, {beta, gamma})

    assert result.delta.to_link == frozenset({gamma})
    assert result.delta.to_unlink == frozenset({alpha})
    assert result.removed_tags == ()
    with store.session() as session:
        assert queries.tag_members(session, tag_id) == {beta, gamma}
        assert queries.get_mod(session, gamma).updated >= before


def test_retag_members_without_changes_does_nothing(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    with store.session() as session:
        tag_id = queries.require_tag(session, "Body").id

    result = retag_members(store, tag_id, {alpha})

    assert result.delta.is_empty
    with store.session() as session:
        assert queries.tag_members(session, tag_id) == {alpha}


def test_retag_members_collects_emptied_tag(store: ModStore) -> None:
    add_mod(store, "Alpha", tags=["Body"])
    with store.session() as session:
        tag_id = queries.require_tag(session, "Body").id

    result = retag_members(store, tag_id, set())

    assert result.removed_tags == ("Body",)
    with store.session() as session:
        assert queries.find_tag(session, "Body") is None


def test_replace_mod_tags_uses_set_difference(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body", "Hair"])
    add_mod(store, "Beta", tags=["Hair"])

    with store.transaction() as session:
        removed = replace_mod_tags(session, alpha, ["Hair", "Shoes"])

    assert removed == ["Body"]
    with store.session() as session:
        assert [tag.tag for tag in queries.tags_for_mod(session, alpha)] == ["Hair", "Shoes"]


def test_parse_tag_list_trims_and_deduplicates() -> None:
    assert parse_tag_list(" Body, Hair,,Body , ") == ["Body", "Hair"]
    assert normalize_tags(["", "  "]) == []
