"""
DTOs del espejo CMS: items del mapa, tags, webhooks y sync completo.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.domain.entities.content import MapItem, Tag
from app.domain.entities.webhook import WebhookEvent, parse_event_type
from app.shared.constants.content_constants import ContentKind, ReconcileMode


class TagDTO(BaseModel):
    id: str
    external_id: str
    name: str
    slug: Optional[str] = None

    @classmethod
    def from_entity(cls, tag: Tag) -> "TagDTO":
        return cls(id=tag.id, external_id=tag.external_id, name=tag.name, slug=tag.slug)


class MapItemBaseDTO(BaseModel):
    """Campos comunes a todos los tipos de contenido."""

    id: str
    external_id: str
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    main_image_url: Optional[str] = None
    video_url: Optional[str] = None
    button_text: Optional[str] = None
    latitude: float
    longitude: float
    location_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: List[TagDTO] = Field(default_factory=list)


class StoryDTO(MapItemBaseDTO):
    kind: Literal["story"] = "story"
    audio_url: Optional[str] = None
    published_at: Optional[datetime] = None


class PlaceDTO(MapItemBaseDTO):
    kind: Literal["place"] = "place"
    address: Optional[str] = None
    website_url: Optional[str] = None
    opening_hours: Optional[str] = None


class InitiativeDTO(MapItemBaseDTO):
    kind: Literal["initiative"] = "initiative"
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    playlist_url: Optional[str] = None
    event_url: Optional[str] = None


MapItemDTO = Annotated[Union[StoryDTO, PlaceDTO, InitiativeDTO], Field(discriminator="kind")]

_DTO_BY_KIND = {
    ContentKind.STORY: StoryDTO,
    ContentKind.PLACE: PlaceDTO,
    ContentKind.INITIATIVE: InitiativeDTO,
}


def to_item_dto(item: MapItem) -> Union[StoryDTO, PlaceDTO, InitiativeDTO]:
    """MapItem -> DTO del tipo correspondiente (campos comunes + details)."""
    dto_cls = _DTO_BY_KIND[item.kind]
    return dto_cls(
        id=item.id,
        external_id=item.external_id,
        title=item.title,
        slug=item.slug,
        description=item.description,
        thumbnail_url=item.thumbnail_url,
        main_image_url=item.main_image_url,
        video_url=item.video_url,
        button_text=item.button_text,
        latitude=item.latitude,
        longitude=item.longitude,
        location_name=item.location_name,
        created_at=item.created_at,
        updated_at=item.updated_at,
        tags=[TagDTO.from_entity(tag) for tag in item.tags],
        **asdict(item.details),
    )


class WebhookPayloadDTO(BaseModel):
    """
    Payload del item. Acepta los nombres del CMS (id, fieldData) y los
    normalizados (externalId, fields).
    """

    model_config = ConfigDict(extra="ignore")

    external_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("externalId", "external_id", "id")
    )
    collection_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("collectionId", "collection_id")
    )
    field_data: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("fields", "fieldData")
    )


class WebhookEventDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("eventType", "triggerType", "event_type")
    )
    payload: WebhookPayloadDTO

    def to_event(self) -> Optional[WebhookEvent]:
        """Evento de dominio, o None si el tipo de evento no se reconoce."""
        event_type = parse_event_type(self.event_type)
        if event_type is None:
            return None
        return WebhookEvent(
            event_type=event_type,
            collection_id=self.payload.collection_id,
            external_id=self.payload.external_id,
            fields=self.payload.field_data or {},
        )


class WebhookAckDTO(BaseModel):
    """Respuesta 200 al CMS."""

    received: bool = True
    status: str
    target: Optional[str] = None
    external_id: Optional[str] = Field(None, serialization_alias="externalId")
    reason: Optional[str] = None


class SyncRequestDTO(BaseModel):
    """Body opcional de POST /sync."""

    mode: Optional[ReconcileMode] = Field(None, description="Override de RECONCILE_MODE para esta corrida")
    kinds: Optional[List[ContentKind]] = Field(None, description="Tipos a sincronizar (default: todos)")


class SyncResultDTO(BaseModel):
    """Resultado del sync completo."""

    success: bool
    per_kind_counts: Dict[str, Dict[str, int]] = Field(serialization_alias="perKindCounts")
    details: Dict[str, Any] = Field(default_factory=dict)
    mode: ReconcileMode
