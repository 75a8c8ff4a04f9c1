"""
Tests del mapper CMS -> borradores tipados.
"""
from datetime import datetime, timezone

import pytest

from app.domain.entities.content import InitiativeDetails, PlaceDetails, StoryDetails
from app.infrastructure.external.cms.field_mapper import map_item_to_draft, map_tag_item
from app.infrastructure.external.cms.table_mappings import (
    INITIATIVE_CONFIG,
    PLACE_CONFIG,
    STORY_CONFIG,
)
from app.infrastructure.external.cms.types import CmsItem, as_link
from app.shared.constants.content_constants import ContentKind
from app.shared.exceptions.domain import InvalidItemException


def test_story_item_maps_common_and_specific_fields() -> None:
    item = CmsItem(
        item_id="s1",
        fields={
            "name": "  Forest Walk ",
            "slug": "forest-walk",
            "episode-description": "Un paseo",
            "cover-image": {"url": "https://cdn/cover.jpg", "alt": None},
            "main-image": "https://cdn/main.jpg",
            "youtube-link": "https://youtu.be/x",
            "spotify-link": {"url": "https://open.spotify.com/ep"},
            "published-date": "2024-03-01T10:00:00.000Z",
            "location-name": "Utrecht",
            "location-coordinates": "52.01, 4.35",
            "episode-tags": ["t1", "t2"],
        },
    )

    draft = map_item_to_draft(item, STORY_CONFIG)

    assert draft.kind == ContentKind.STORY
    assert draft.external_id == "s1"
    assert draft.title == "Forest Walk"
    assert draft.slug == "forest-walk"
    assert draft.description == "Un paseo"
    assert draft.thumbnail_url == "https://cdn/cover.jpg"
    assert draft.main_image_url == "https://cdn/main.jpg"
    assert draft.video_url == "https://youtu.be/x"
    assert draft.location_name == "Utrecht"
    assert (draft.latitude, draft.longitude) == (52.01, 4.35)
    assert draft.tag_refs == ("t1", "t2")
    assert draft.details == StoryDetails(
        audio_url="https://open.spotify.com/ep",
        published_at=datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
    )


def test_field_variants_fall_back_in_order() -> None:
    item = CmsItem(
        item_id="s2",
        fields={
            "name": "Episode",
            "cover-image": "",
            "thumbnail": "https://cdn/thumb.jpg",
            "description": "fallback",
            "latitude": 1,
            "longitude": 2,
            "tags": "t9",
        },
    )

    draft = map_item_to_draft(item, STORY_CONFIG)

    assert draft.thumbnail_url == "https://cdn/thumb.jpg"
    assert draft.description == "fallback"
    assert draft.tag_refs == ("t9",)


def test_unparseable_date_does_not_reject_item() -> None:
    item = CmsItem(
        item_id="i1",
        fields={
            "name": "Festival",
            "start-date": "pronto",
            "end-date": "2024-07-02T00:00:00Z",
            "playlist-link-2": "https://music/list",
            "location-coordinates": "40.4, -3.7",
            "initiative-tags-2": ["t1", 5, "", None],
        },
    )

    draft = map_item_to_draft(item, INITIATIVE_CONFIG)

    assert isinstance(draft.details, InitiativeDetails)
    assert draft.details.event_date is None
    assert draft.details.end_date == datetime(2024, 7, 2, tzinfo=timezone.utc)
    assert draft.details.playlist_url == "https://music/list"
    assert draft.tag_refs == ("t1",)


def test_place_specific_fields() -> None:
    item = CmsItem(
        item_id="p1",
        fields={
            "name": "Cafe",
            "address": "Main St 1",
            "website-link": {"url": "https://cafe.example"},
            "opening-hours": "9-17",
            "location-coordinates": "52.0, 4.0",
        },
    )

    draft = map_item_to_draft(item, PLACE_CONFIG)

    assert draft.details == PlaceDetails(
        address="Main St 1", website_url="https://cafe.example", opening_hours="9-17"
    )
    assert draft.column_values()["address"] == "Main St 1"


def test_missing_title_is_rejected() -> None:
    item = CmsItem(item_id="p2", fields={"name": "   ", "location-coordinates": "1, 2"})

    with pytest.raises(InvalidItemException) as exc_info:
        map_item_to_draft(item, PLACE_CONFIG)

    assert exc_info.value.reason == InvalidItemException.MISSING_TITLE
    assert exc_info.value.external_id == "p2"


def test_invalid_coordinates_are_rejected() -> None:
    item = CmsItem(item_id="p3", fields={"name": "Sin mapa", "location-coordinates": "not-a-number, 4.3"})

    with pytest.raises(InvalidItemException) as exc_info:
        map_item_to_draft(item, PLACE_CONFIG)

    assert exc_info.value.reason == InvalidItemException.INVALID_COORDINATES


def test_tag_item_requires_name() -> None:
    assert map_tag_item(CmsItem(item_id="t1", fields={"name": "Nature", "slug": "nature"})).name == "Nature"

    with pytest.raises(InvalidItemException) as exc_info:
        map_tag_item(CmsItem(item_id="t2", fields={"slug": "x"}))

    assert exc_info.value.reason == InvalidItemException.MISSING_NAME


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://a", "https://a"),
        ({"url": "https://b", "alt": "x"}, "https://b"),
        ({"alt": "no url"}, None),
        ("", None),
        (None, None),
    ],
)
def test_link_normalisation(raw, expected) -> None:
    assert as_link(raw) == expected
