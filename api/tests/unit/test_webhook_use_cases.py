"""
Tests del sync incremental por webhook.
"""
import pytest
from sqlalchemy import func, select

from app.application.use_cases.webhook_use_cases import WebhookUseCases
from app.domain.entities.webhook import WebhookEvent, parse_event_type
from app.infrastructure.database.models import StoryModel, StoryTagModel, TagModel
from app.infrastructure.repositories.content_repository import ContentRepository
from app.shared.constants.content_constants import (
    CollectionKind,
    ContentKind,
    WebhookEventType,
    WebhookOutcomeStatus,
)
from app.shared.exceptions.domain import InvalidItemException


def _event(event_type: str, collection_id: str, external_id, fields=None) -> WebhookEvent:
    return WebhookEvent(
        event_type=parse_event_type(event_type),
        collection_id=collection_id,
        external_id=external_id,
        fields=fields or {},
    )


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("created", WebhookEventType.CREATED),
        ("collection_item_changed", WebhookEventType.CHANGED),
        ("COLLECTION_ITEM_DELETED", WebhookEventType.DELETED),
        ("collection_item_unpublished", WebhookEventType.UNPUBLISHED),
        ("site_publish", None),
        (None, None),
    ],
)
def test_event_type_normalisation(raw, expected) -> None:
    assert parse_event_type(raw) == expected


@pytest.mark.asyncio
async def test_forest_walk_end_to_end(db_session, registry) -> None:
    use_cases = WebhookUseCases(db_session, registry)

    tag_outcome = await use_cases.handle_event(
        _event("collection_item_created", "col-story-tags", "t1", {"name": "Nature", "slug": "nature"})
    )
    story_outcome = await use_cases.handle_event(
        _event(
            "collection_item_created",
            "col-stories",
            "s1",
            {"name": "Forest Walk", "location-coordinates": "52.01, 4.35", "episode-tags": ["t1"]},
        )
    )

    assert tag_outcome.status == WebhookOutcomeStatus.APPLIED
    assert tag_outcome.target == CollectionKind.TAG
    assert story_outcome.status == WebhookOutcomeStatus.APPLIED
    assert story_outcome.target == CollectionKind.STORY

    repo = ContentRepository(db_session)
    story = await repo.get_by_external_id(ContentKind.STORY, "s1")
    assert story.title == "Forest Walk"
    assert (story.latitude, story.longitude) == (52.01, 4.35)
    assert [tag.name for tag in story.tags] == ["Nature"]

    await use_cases.handle_event(
        _event(
            "collection_item_changed",
            "col-stories",
            "s1",
            {"name": "Forest Walk", "location-coordinates": "52.01, 4.35", "episode-tags": []},
        )
    )

    story_after = await repo.get_by_external_id(ContentKind.STORY, "s1")
    assert story_after.id == story.id
    assert story_after.tags == []
    assert await _count(db_session, StoryTagModel) == 0
    assert await _count(db_session, StoryModel) == 1
    assert await _count(db_session, TagModel) == 1


@pytest.mark.asyncio
async def test_replayed_event_is_idempotent(db_session, registry) -> None:
    use_cases = WebhookUseCases(db_session, registry)
    event = _event("changed", "col-places", "p1", {"name": "Cafe", "latitude": "1", "longitude": "2"})

    await use_cases.handle_event(event)
    await use_cases.handle_event(event)

    assert await ContentRepository(db_session).count_entities(ContentKind.PLACE) == 1


@pytest.mark.asyncio
async def test_unknown_collection_is_ignored_without_writes(db_session, registry) -> None:
    outcome = await WebhookUseCases(db_session, registry).handle_event(
        _event("created", "col-unknown", "x1", {"name": "X", "location-coordinates": "1, 2"})
    )

    assert outcome.status == WebhookOutcomeStatus.IGNORED
    assert outcome.reason == "unknown_collection"
    assert await _count(db_session, StoryModel) == 0
    assert await _count(db_session, TagModel) == 0


@pytest.mark.asyncio
async def test_missing_item_id_is_ignored(db_session, registry) -> None:
    outcome = await WebhookUseCases(db_session, registry).handle_event(
        _event("created", "col-stories", None, {"name": "X"})
    )

    assert outcome.status == WebhookOutcomeStatus.IGNORED
    assert outcome.reason == "missing_id"


@pytest.mark.asyncio
async def test_invalid_coordinates_are_skipped_and_existing_row_kept(db_session, registry) -> None:
    use_cases = WebhookUseCases(db_session, registry)
    await use_cases.handle_event(
        _event("created", "col-stories", "s1", {"name": "Original", "location-coordinates": "1, 2"})
    )

    outcome = await use_cases.handle_event(
        _event("changed", "col-stories", "s1", {"name": "Roto", "location-coordinates": "not-a-number, 4.3"})
    )

    assert outcome.status == WebhookOutcomeStatus.SKIPPED
    assert outcome.reason == InvalidItemException.INVALID_COORDINATES
    story = await ContentRepository(db_session).get_by_external_id(ContentKind.STORY, "s1")
    assert story.title == "Original"


@pytest.mark.asyncio
async def test_delete_and_unpublish_remove_the_entity(db_session, registry) -> None:
    use_cases = WebhookUseCases(db_session, registry)
    for external_id in ("s1", "s2"):
        await use_cases.handle_event(
            _event("created", "col-stories", external_id, {"name": external_id, "location-coordinates": "1, 2"})
        )

    deleted = await use_cases.handle_event(_event("collection_item_deleted", "col-stories", "s1"))
    unpublished = await use_cases.handle_event(_event("collection_item_unpublished", "col-stories", "s2"))
    missing = await use_cases.handle_event(_event("deleted", "col-stories", "never-existed"))

    assert deleted.status == WebhookOutcomeStatus.DELETED
    assert unpublished.status == WebhookOutcomeStatus.DELETED
    assert missing.status == WebhookOutcomeStatus.DELETED
    assert await _count(db_session, StoryModel) == 0


@pytest.mark.asyncio
async def test_tag_delete_cascades_to_entities(db_session, registry) -> None:
    use_cases = WebhookUseCases(db_session, registry)
    await use_cases.handle_event(_event("created", "col-place-tags", "t1", {"name": "Food"}))
    await use_cases.handle_event(
        _event("created", "col-stories", "s1", {"name": "S", "location-coordinates": "1, 2", "tags": ["t1"]})
    )
    assert await _count(db_session, StoryTagModel) == 1

    outcome = await use_cases.handle_event(_event("deleted", "col-place-tags", "t1"))

    assert outcome.status == WebhookOutcomeStatus.DELETED
    assert await _count(db_session, TagModel) == 0
    assert await _count(db_session, StoryTagModel) == 0
    assert await _count(db_session, StoryModel) == 1


@pytest.mark.asyncio
async def test_tag_without_name_is_skipped(db_session, registry) -> None:
    outcome = await WebhookUseCases(db_session, registry).handle_event(
        _event("created", "col-story-tags", "t1", {"slug": "x"})
    )

    assert outcome.status == WebhookOutcomeStatus.SKIPPED
    assert outcome.reason == InvalidItemException.MISSING_NAME
