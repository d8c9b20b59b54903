"""Tests for parent/child resolution."""

from __future__ import annotations

from funcdocs.assembly.hierarchy import find_parent, resolve_hierarchy
from tests._fixtures.docs_builder import code_fragment, static_fragment


def test_nav_id_match_beats_earlier_segment_match() -> None:
    segment_match = code_fragment("first", "Docs / x")
    id_match = code_fragment("second", "Docs / Second", nav_id="x")

    assert find_parent("x", [segment_match, id_match]) is id_match


def test_display_title_match_is_case_insensitive() -> None:
    guide = static_fragment("guides:start.md", "Guides / Start", display_title="Getting Started")

    assert find_parent("getting started", [guide]) is guide


def test_owner_and_last_segment_strategies() -> None:
    service = code_fragment("app.Service", "Core / Service Layer")

    assert find_parent("app.Service", [service]) is service
    assert find_parent("service layer", [service]) is service
    assert find_parent("nothing", [service]) is None


def test_children_are_annotated_and_follow_roots() -> None:
    child = code_fragment("app.Child", "Docs / Child", nav_parent="parent-id")
    parent = code_fragment("app.Parent", "Docs / Parent", nav_id="parent-id")
    other = code_fragment("app.Other", "Other / Page")

    resolved = resolve_hierarchy([child, parent, other])

    assert [fragment.owner for fragment in resolved] == ["app.Parent", "app.Other", "app.Child"]
    annotated = resolved[2]
    assert annotated.is_child_page is True
    assert annotated.parent_nav_id == "parent-id"
    assert annotated.parent_nav_path == "Docs / Parent"
    assert annotated.nav_path == "Docs / Child"


def test_parent_identifier_falls_back_to_owner() -> None:
    parent = code_fragment("app.Parent", "Docs / Parent")
    child = code_fragment("app.Child", "Docs / Child", nav_parent="app.Parent")

    resolved = resolve_hierarchy([parent, child])

    assert resolved[1].parent_nav_id == "app.Parent"


def test_unresolved_parent_keeps_fragment_unannotated() -> None:
    orphan = code_fragment("app.Orphan", "Docs / Orphan", nav_parent="missing-id")

    resolved = resolve_hierarchy([orphan])

    assert len(resolved) == 1
    assert resolved[0].is_child_page is False
    assert resolved[0].parent_nav_id is None
    assert resolved[0].nav_path == "Docs / Orphan"


def test_children_only_resolve_against_roots() -> None:
    middle = code_fragment("app.Middle", "Docs / Middle", nav_id="middle", nav_parent="top")
    leaf = code_fragment("app.Leaf", "Docs / Leaf", nav_parent="middle")
    top = code_fragment("app.Top", "Docs / Top", nav_id="top")

    resolved = {fragment.owner: fragment for fragment in resolve_hierarchy([middle, leaf, top])}

    assert resolved["app.Middle"].is_child_page is True
    assert resolved["app.Leaf"].is_child_page is False
