"""
Configuración del sync (mapeo CMS -> base espejo).

La idea es que aquí tengas control total de:
- qué colección del CMS alimenta cada tipo de contenido
- qué variantes de nombre de field se aceptan por columna
- dónde están las coordenadas y los tags de cada tipo

Este módulo no realiza I/O: solo define configuración.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Type

from app.domain.entities.content import EntityDetails
from app.shared.constants.content_constants import CollectionKind, ContentKind

from .types import CoordinateFields, FieldMapping


@dataclass(frozen=True)
class KindSyncConfig:
    """
    Config de un tipo de contenido (Story, Place, Initiative).

    Un único pipeline genérico recorre estas tablas; los tipos solo
    difieren en nombres de field y en sus campos específicos (`detail_mappings`,
    que alimentan la clase `details_cls`).
    """

    kind: ContentKind
    title: FieldMapping
    common_mappings: Tuple[FieldMapping, ...]
    detail_mappings: Tuple[FieldMapping, ...]
    details_cls: Type[EntityDetails]
    tag_fields: Tuple[str, ...]
    coordinates: CoordinateFields = field(default_factory=CoordinateFields)


@dataclass(frozen=True)
class CollectionRegistry:
    """
    Mapeo estático collection_id -> tipo, construido desde Settings.

    IDs vacíos significan "colección no configurada" y se omiten.
    """

    content_collections: Dict[ContentKind, str]
    tag_collections: Dict[ContentKind, str]

    @classmethod
    def from_ids(
        cls,
        *,
        stories: str = "",
        story_tags: str = "",
        places: str = "",
        place_tags: str = "",
        initiatives: str = "",
        initiative_tags: str = "",
    ) -> "CollectionRegistry":
        content = {
            ContentKind.STORY: stories,
            ContentKind.PLACE: places,
            ContentKind.INITIATIVE: initiatives,
        }
        tags = {
            ContentKind.STORY: story_tags,
            ContentKind.PLACE: place_tags,
            ContentKind.INITIATIVE: initiative_tags,
        }
        return cls(
            content_collections={k: v for k, v in content.items() if v},
            tag_collections={k: v for k, v in tags.items() if v},
        )

    def resolve(self, collection_id: Optional[str]) -> Optional[CollectionKind]:
        """
        Tipo destino de una colección, o None si esta instalación no la sigue.
        """
        if not collection_id:
            return None
        for kind, cid in self.content_collections.items():
            if cid == collection_id:
                return CollectionKind(kind.value)
        if collection_id in self.tag_collections.values():
            return CollectionKind.TAG
        return None

    def content_collection(self, kind: ContentKind) -> Optional[str]:
        return self.content_collections.get(kind)

    def tag_collection(self, kind: ContentKind) -> Optional[str]:
        return self.tag_collections.get(kind)

    def all_tag_collections(self) -> Tuple[str, ...]:
        """IDs de colecciones de tags sin duplicados (varias colecciones pueden compartirse)."""
        seen: Dict[str, None] = {}
        for cid in self.tag_collections.values():
            seen.setdefault(cid, None)
        return tuple(seen)
