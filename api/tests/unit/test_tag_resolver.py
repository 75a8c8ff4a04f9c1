"""
Tests del resolver de tags.
"""
from app.application.services.tag_resolver import resolve_tags
from app.domain.entities.content import Tag


LOOKUP = {
    "t1": Tag(id="local-1", external_id="t1", name="Nature"),
    "t2": Tag(id="local-2", external_id="t2", name="Music"),
}


def test_resolves_in_input_order() -> None:
    tags = resolve_tags(["t2", "t1"], LOOKUP)

    assert [tag.id for tag in tags] == ["local-2", "local-1"]


def test_unresolved_and_malformed_refs_are_dropped() -> None:
    tags = resolve_tags(["t1", "missing", None, 42, "", "t2"], LOOKUP)

    assert [tag.external_id for tag in tags] == ["t1", "t2"]


def test_duplicates_resolve_once() -> None:
    tags = resolve_tags(["t1", "t1", "t2", "t1"], LOOKUP)

    assert [tag.id for tag in tags] == ["local-1", "local-2"]


def test_empty_refs_resolve_to_empty_list() -> None:
    assert resolve_tags([], LOOKUP) == []
    assert resolve_tags(["t1"], {}) == []
