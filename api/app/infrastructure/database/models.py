"""
Modelos de base de datos (ORM).

Tres tablas de contenido (story, place, initiative) con columnas comunes,
una tabla de tags compartida y una tabla junction por tipo.
"""
import uuid
from dataclasses import dataclass
from typing import Dict, Type

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.sql import func

from app.infrastructure.database.session import Base
from app.shared.constants.content_constants import ContentKind


def _new_uuid() -> str:
    return str(uuid.uuid4())


class ContentColumnsMixin:
    """Columnas comunes a los tres tipos de contenido."""

    id = Column(String(36), primary_key=True, default=_new_uuid)
    external_id = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    slug = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    main_image_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    button_text = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    location_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<{type(self).__name__}(id={self.id}, external_id={self.external_id}, title={self.title})>"


class StoryModel(ContentColumnsMixin, Base):
    """Episodios / historias con audio."""

    __tablename__ = "story"
    __table_args__ = (
        Index("ix_story_external_id", "external_id", unique=True),
        Index("ix_story_slug", "slug"),
        Index("ix_story_lat_lng", "latitude", "longitude"),
    )

    audio_url = Column(Text, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)


class PlaceModel(ContentColumnsMixin, Base):
    """Lugares fisicos."""

    __tablename__ = "place"
    __table_args__ = (
        Index("ix_place_external_id", "external_id", unique=True),
        Index("ix_place_slug", "slug"),
        Index("ix_place_lat_lng", "latitude", "longitude"),
    )

    address = Column(Text, nullable=True)
    website_url = Column(Text, nullable=True)
    opening_hours = Column(Text, nullable=True)


class InitiativeModel(ContentColumnsMixin, Base):
    """Iniciativas / eventos con fecha."""

    __tablename__ = "initiative"
    __table_args__ = (
        Index("ix_initiative_external_id", "external_id", unique=True),
        Index("ix_initiative_slug", "slug"),
        Index("ix_initiative_lat_lng", "latitude", "longitude"),
        Index("ix_initiative_event_date", "event_date"),
    )

    event_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    playlist_url = Column(Text, nullable=True)
    event_url = Column(Text, nullable=True)


class TagModel(Base):
    """Tag compartido por todos los tipos de contenido."""

    __tablename__ = "tag"

    id = Column(String(36), primary_key=True, default=_new_uuid)
    external_id = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Tag(id={self.id}, external_id={self.external_id}, name={self.name})>"


class StoryTagModel(Base):
    __tablename__ = "story_tag"

    story_id = Column(String(36), ForeignKey("story.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True, index=True)


class PlaceTagModel(Base):
    __tablename__ = "place_tag"

    place_id = Column(String(36), ForeignKey("place.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True, index=True)


class InitiativeTagModel(Base):
    __tablename__ = "initiative_tag"

    initiative_id = Column(String(36), ForeignKey("initiative.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True, index=True)


@dataclass(frozen=True)
class EntityTable:
    """Tabla de un tipo + su junction y la columna que apunta a la entidad."""

    model: Type[Base]
    junction: Type[Base]
    owner_column: str

    @property
    def owner_attr(self):
        return getattr(self.junction, self.owner_column)


ENTITY_TABLES: Dict[ContentKind, EntityTable] = {
    ContentKind.STORY: EntityTable(StoryModel, StoryTagModel, "story_id"),
    ContentKind.PLACE: EntityTable(PlaceModel, PlaceTagModel, "place_id"),
    ContentKind.INITIATIVE: EntityTable(InitiativeModel, InitiativeTagModel, "initiative_id"),
}

JUNCTION_MODELS = tuple(table.junction for table in ENTITY_TABLES.values())
