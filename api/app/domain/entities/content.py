"""
Entidades del contenido espejado del CMS.

Modelo polimorfico como union etiquetada: todos los items comparten los
campos comunes y llevan un `kind` discriminador mas un payload `details`
especifico del tipo (StoryDetails | PlaceDetails | InitiativeDetails).

Libres de I/O: las usan tanto el mapper (borradores) como la capa de lectura.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from app.shared.constants.content_constants import ContentKind


@dataclass(frozen=True)
class Coordinates:
    """Par latitud/longitud ya validado."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class Tag:
    """
    Tag compartido entre todos los tipos.

    En modo espejo `id` es el ID local; en modo fallback (lectura directa
    del CMS) `id` y `external_id` coinciden.
    """

    id: str
    external_id: str
    name: str
    slug: Optional[str] = None


@dataclass(frozen=True)
class TagDraft:
    """Tag mapeado desde el CMS, aun sin ID local."""

    external_id: str
    name: str
    slug: Optional[str] = None


@dataclass(frozen=True)
class StoryDetails:
    audio_url: Optional[str] = None
    published_at: Optional[datetime] = None


@dataclass(frozen=True)
class PlaceDetails:
    address: Optional[str] = None
    website_url: Optional[str] = None
    opening_hours: Optional[str] = None


@dataclass(frozen=True)
class InitiativeDetails:
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    playlist_url: Optional[str] = None
    event_url: Optional[str] = None


EntityDetails = Union[StoryDetails, PlaceDetails, InitiativeDetails]

DETAILS_BY_KIND = {
    ContentKind.STORY: StoryDetails,
    ContentKind.PLACE: PlaceDetails,
    ContentKind.INITIATIVE: InitiativeDetails,
}


@dataclass(frozen=True)
class EntityDraft:
    """
    Item de contenido mapeado desde el CMS, listo para el upsert.

    Los nombres de campo (comunes y de `details`) coinciden con las columnas
    de la tabla del tipo, de modo que `column_values()` es directamente la fila.
    """

    kind: ContentKind
    external_id: str
    title: str
    latitude: float
    longitude: float
    details: EntityDetails
    slug: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    main_image_url: Optional[str] = None
    video_url: Optional[str] = None
    button_text: Optional[str] = None
    location_name: Optional[str] = None
    tag_refs: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        expected = DETAILS_BY_KIND[self.kind]
        if not isinstance(self.details, expected):
            raise TypeError(
                f"details de tipo {type(self.details).__name__} no corresponde a kind={self.kind.value}"
            )

    def column_values(self) -> Dict[str, Any]:
        """Columnas mutables de la fila (sin id, external_id ni timestamps)."""
        values: Dict[str, Any] = {
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "main_image_url": self.main_image_url,
            "video_url": self.video_url,
            "button_text": self.button_text,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "location_name": self.location_name,
        }
        values.update(asdict(self.details))
        return values


@dataclass(frozen=True)
class MapItem:
    """Item de contenido servido por la capa de lectura (con tags resueltos)."""

    id: str
    external_id: str
    kind: ContentKind
    title: str
    latitude: float
    longitude: float
    details: EntityDetails
    slug: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    main_image_url: Optional[str] = None
    video_url: Optional[str] = None
    button_text: Optional[str] = None
    location_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: List[Tag] = field(default_factory=list)

    @classmethod
    def from_draft(cls, draft: EntityDraft, tags: List[Tag]) -> "MapItem":
        """Construye un item "live" (sin fila local): el ID es el del CMS."""
        return cls(
            id=draft.external_id,
            external_id=draft.external_id,
            kind=draft.kind,
            title=draft.title,
            latitude=draft.latitude,
            longitude=draft.longitude,
            details=draft.details,
            slug=draft.slug,
            description=draft.description,
            thumbnail_url=draft.thumbnail_url,
            main_image_url=draft.main_image_url,
            video_url=draft.video_url,
            button_text=draft.button_text,
            location_name=draft.location_name,
            tags=list(tags),
        )

    def has_any_tag(self, tag_ids: List[str]) -> bool:
        """Filtro OR: coincide si tiene alguno de los tags (ID local o externo)."""
        wanted = set(tag_ids)
        return any(tag.id in wanted or tag.external_id in wanted for tag in self.tags)


@dataclass
class UpsertResult:
    """Resultado del upsert de una entidad."""

    entity_id: str
    created: bool
    tag_count: int
