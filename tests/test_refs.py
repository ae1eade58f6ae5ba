"""Tests for reference normalization."""
from __future__ import annotations

from barberworld.refs import Resolved, Unresolved, id_of, parse_ref, same_id


def test_raw_ids_become_unresolved_strings() -> None:
    assert parse_ref("u1") == Unresolved("u1")
    assert parse_ref(42) == Unresolved("42")


def test_populated_objects_become_resolved() -> None:
    ref = parse_ref({"_id": "s1", "name": "Fade Factory", "city": "Newark"})

    assert isinstance(ref, Resolved)
    assert ref.id == "s1"
    assert ref.name == "Fade Factory"
    assert ref.summary == {"name": "Fade Factory", "city": "Newark"}


def test_plain_id_key_is_accepted() -> None:
    assert id_of({"id": 7}) == "7"


def test_missing_references() -> None:
    assert parse_ref(None) is None
    assert parse_ref("") is None
    assert parse_ref({"name": "no id"}) is None
    assert id_of(None) is None


def test_same_id_across_representations() -> None:
    assert same_id("u1", {"_id": "u1"})
    assert same_id(5, "5")
    assert same_id(Resolved("9", {"name": "x"}), Unresolved("9"))
    assert not same_id("u1", "u2")
    assert not same_id(None, None)
