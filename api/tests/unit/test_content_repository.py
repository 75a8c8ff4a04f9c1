"""
Tests del motor de upsert (ContentRepository + TagRepository) sobre SQLite en memoria.
"""
from typing import Tuple

import pytest
from sqlalchemy import func, select

from app.domain.entities.content import EntityDraft, PlaceDetails, StoryDetails, TagDraft
from app.infrastructure.database.models import (
    InitiativeTagModel,
    PlaceTagModel,
    StoryModel,
    StoryTagModel,
    TagModel,
)
from app.infrastructure.repositories.content_repository import ContentRepository
from app.infrastructure.repositories.tag_repository import TagRepository
from app.shared.constants.content_constants import ContentKind


def _story(external_id: str = "s1", title: str = "Forest Walk", tag_refs: Tuple[str, ...] = ()) -> EntityDraft:
    return EntityDraft(
        kind=ContentKind.STORY,
        external_id=external_id,
        title=title,
        latitude=52.01,
        longitude=4.35,
        details=StoryDetails(audio_url="https://audio/ep"),
        slug=f"{external_id}-slug",
        tag_refs=tag_refs,
    )


def _place(external_id: str = "p1") -> EntityDraft:
    return EntityDraft(
        kind=ContentKind.PLACE,
        external_id=external_id,
        title="Cafe",
        latitude=1.0,
        longitude=2.0,
        details=PlaceDetails(address="Main St"),
    )


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


async def _tags(session, *names: str):
    repo = TagRepository(session)
    tags = [await repo.upsert_tag(TagDraft(external_id=name, name=name.upper())) for name in names]
    await session.commit()
    return tags


def test_draft_rejects_details_of_another_kind() -> None:
    with pytest.raises(TypeError):
        EntityDraft(
            kind=ContentKind.STORY,
            external_id="x",
            title="x",
            latitude=0.0,
            longitude=0.0,
            details=PlaceDetails(),
        )


@pytest.mark.asyncio
async def test_upsert_is_idempotent(db_session) -> None:
    repo = ContentRepository(db_session)
    t1, = await _tags(db_session, "t1")

    first = await repo.upsert_entity(_story(), [t1])
    await db_session.commit()
    before = await repo.get_by_external_id(ContentKind.STORY, "s1")

    second = await repo.upsert_entity(_story(), [t1])
    await db_session.commit()
    after = await repo.get_by_external_id(ContentKind.STORY, "s1")

    assert first.created is True
    assert second.created is False
    assert first.entity_id == second.entity_id
    assert await _count(db_session, StoryModel) == 1
    assert await _count(db_session, StoryTagModel) == 1
    assert after.id == before.id
    assert after.created_at == before.created_at
    assert after.updated_at >= before.updated_at
    assert [tag.external_id for tag in after.tags] == ["t1"]


@pytest.mark.asyncio
async def test_update_mutates_fields_but_keeps_identity(db_session) -> None:
    repo = ContentRepository(db_session)
    created = await repo.upsert_entity(_story(title="Old title"), [])
    await db_session.commit()

    updated = await repo.upsert_entity(_story(title="New title"), [])
    await db_session.commit()

    item = await repo.get_by_external_id(ContentKind.STORY, "s1")
    assert updated.entity_id == created.entity_id
    assert item.title == "New title"
    assert item.details.audio_url == "https://audio/ep"


@pytest.mark.asyncio
async def test_tags_are_fully_replaced_including_empty_set(db_session) -> None:
    repo = ContentRepository(db_session)
    t1, t2, t3 = await _tags(db_session, "t1", "t2", "t3")

    await repo.upsert_entity(_story(), [t1, t2])
    await db_session.commit()
    await repo.upsert_entity(_story(), [t3])
    await db_session.commit()

    item = await repo.get_by_external_id(ContentKind.STORY, "s1")
    assert [tag.external_id for tag in item.tags] == ["t3"]

    result = await repo.upsert_entity(_story(), [])
    await db_session.commit()

    item = await repo.get_by_external_id(ContentKind.STORY, "s1")
    assert result.tag_count == 0
    assert item.tags == []
    assert await _count(db_session, StoryTagModel) == 0


@pytest.mark.asyncio
async def test_duplicate_tags_produce_single_junction_row(db_session) -> None:
    repo = ContentRepository(db_session)
    t1, = await _tags(db_session, "t1")

    result = await repo.upsert_entity(_story(), [t1, t1])
    await db_session.commit()

    assert result.tag_count == 1
    assert await _count(db_session, StoryTagModel) == 1


@pytest.mark.asyncio
async def test_delete_entity_removes_junction_rows(db_session) -> None:
    repo = ContentRepository(db_session)
    t1, t2 = await _tags(db_session, "t1", "t2")
    await repo.upsert_entity(_story(), [t1, t2])
    await db_session.commit()

    assert await repo.delete_entity(ContentKind.STORY, "s1") is True
    await db_session.commit()

    assert await _count(db_session, StoryModel) == 0
    assert await _count(db_session, StoryTagModel) == 0
    assert await _count(db_session, TagModel) == 2
    assert await repo.delete_entity(ContentKind.STORY, "s1") is False


@pytest.mark.asyncio
async def test_delete_tag_removes_junction_rows_in_every_kind(db_session) -> None:
    content = ContentRepository(db_session)
    tags = TagRepository(db_session)
    t1, t2 = await _tags(db_session, "t1", "t2")
    await content.upsert_entity(_story(), [t1, t2])
    await content.upsert_entity(_place(), [t1])
    await db_session.commit()

    assert await tags.delete_tag("t1") is True
    await db_session.commit()

    story = await content.get_by_external_id(ContentKind.STORY, "s1")
    place = await content.get_by_external_id(ContentKind.PLACE, "p1")
    assert [tag.external_id for tag in story.tags] == ["t2"]
    assert place.tags == []
    assert await _count(db_session, PlaceTagModel) == 0
    assert await _count(db_session, InitiativeTagModel) == 0
    assert await tags.delete_tag("t1") is False


@pytest.mark.asyncio
async def test_database_cascade_removes_junction_rows(db_session) -> None:
    """Las FK ON DELETE CASCADE actúan aun sin borrar la junction explícitamente."""
    content = ContentRepository(db_session)
    t1, = await _tags(db_session, "t1")
    await content.upsert_entity(_story(), [t1])
    await db_session.commit()

    await db_session.execute(TagModel.__table__.delete().where(TagModel.external_id == "t1"))
    await db_session.commit()

    assert await _count(db_session, StoryTagModel) == 0


@pytest.mark.asyncio
async def test_concurrent_insert_race_retries_as_update(session_factory) -> None:
    async with session_factory() as winner:
        await ContentRepository(winner).upsert_entity(_story(title="Winner"), [])
        await winner.commit()

    async with session_factory() as loser:
        repo = ContentRepository(loser)
        original_get_row = repo._get_row
        calls = {"n": 0}

        async def stale_first_lookup(table, external_id):
            # Simula que el lookup ocurrió antes del commit del otro webhook
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return await original_get_row(table, external_id)

        repo._get_row = stale_first_lookup
        result = await repo.upsert_entity(_story(title="Loser"), [])
        await loser.commit()

        item = await repo.get_by_external_id(ContentKind.STORY, "s1")

    assert result.created is False
    assert item.title == "Loser"


@pytest.mark.asyncio
async def test_list_entities_filters_by_local_or_external_tag_id(db_session) -> None:
    repo = ContentRepository(db_session)
    t1, t2 = await _tags(db_session, "t1", "t2")
    await repo.upsert_entity(_story("s1"), [t1])
    await repo.upsert_entity(_story("s2"), [t2])
    await repo.upsert_entity(_story("s3"), [])
    await db_session.commit()

    by_external = await repo.list_entities(ContentKind.STORY, ["t1"])
    by_local = await repo.list_entities(ContentKind.STORY, [t2.id])
    either = await repo.list_entities(ContentKind.STORY, ["t1", t2.id])
    everything = await repo.list_entities(ContentKind.STORY)

    assert [i.external_id for i in by_external] == ["s1"]
    assert [i.external_id for i in by_local] == ["s2"]
    assert sorted(i.external_id for i in either) == ["s1", "s2"]
    assert len(everything) == 3


@pytest.mark.asyncio
async def test_prune_missing_deletes_unlisted_rows(db_session) -> None:
    repo = ContentRepository(db_session)
    for external_id in ("s1", "s2", "s3"):
        await repo.upsert_entity(_story(external_id), [])
    await db_session.commit()

    deleted = await repo.prune_missing(ContentKind.STORY, ["s2"])
    await db_session.commit()

    assert deleted == 2
    assert [i.external_id for i in await repo.list_entities(ContentKind.STORY)] == ["s2"]


@pytest.mark.asyncio
async def test_get_by_slug_searches_requested_kinds(db_session) -> None:
    repo = ContentRepository(db_session)
    await repo.upsert_entity(_story("s1"), [])
    await db_session.commit()

    assert (await repo.get_by_slug("s1-slug")).external_id == "s1"
    assert await repo.get_by_slug("s1-slug", [ContentKind.PLACE]) is None
    assert await repo.get_by_slug("nope") is None
