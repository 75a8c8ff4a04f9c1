"""
Mapeos CMS -> base espejo por tipo de contenido.

Este es el punto recomendado para ajustar:
- los nombres de field de cada colección del CMS
- las variantes aceptadas (migraciones de esquema en el CMS)
- los campos específicos de cada tipo

Nota: las colecciones del CMS usan sufijos '-2' en algunos fields porque
fueron duplicadas desde colecciones previas; se mantienen tal cual.
"""

from __future__ import annotations

from typing import Dict

from app.domain.entities.content import InitiativeDetails, PlaceDetails, StoryDetails
from app.shared.constants.content_constants import ContentKind

from .sync_config import KindSyncConfig
from .types import FieldMapping, as_datetime, as_link, as_text


TITLE = FieldMapping("title", ("name",))
SLUG = FieldMapping("slug", ("slug",))
LOCATION_NAME = FieldMapping("location_name", ("location-name",))


STORY_CONFIG = KindSyncConfig(
    kind=ContentKind.STORY,
    title=TITLE,
    common_mappings=(
        SLUG,
        FieldMapping("description", ("episode-description", "description")),
        FieldMapping("thumbnail_url", ("cover-image", "thumbnail"), as_link),
        FieldMapping("main_image_url", ("main-image",), as_link),
        FieldMapping("video_url", ("youtube-link",), as_link),
        FieldMapping("button_text", ("button-text",)),
        LOCATION_NAME,
    ),
    detail_mappings=(
        FieldMapping("audio_url", ("spotify-link",), as_link),
        FieldMapping("published_at", ("published-date",), as_datetime),
    ),
    details_cls=StoryDetails,
    tag_fields=("episode-tags", "tags"),
)


PLACE_CONFIG = KindSyncConfig(
    kind=ContentKind.PLACE,
    title=TITLE,
    common_mappings=(
        SLUG,
        FieldMapping("description", ("description",)),
        FieldMapping("thumbnail_url", ("image",), as_link),
        FieldMapping("main_image_url", ("cover-image",), as_link),
        FieldMapping("video_url", ("youtube-link",), as_link),
        FieldMapping("button_text", ("button-text",)),
        LOCATION_NAME,
    ),
    detail_mappings=(
        FieldMapping("address", ("address",)),
        FieldMapping("website_url", ("website-link",), as_link),
        FieldMapping("opening_hours", ("opening-hours",)),
    ),
    details_cls=PlaceDetails,
    tag_fields=("tags",),
)


INITIATIVE_CONFIG = KindSyncConfig(
    kind=ContentKind.INITIATIVE,
    title=TITLE,
    common_mappings=(
        SLUG,
        FieldMapping("description", ("description",)),
        FieldMapping("thumbnail_url", ("thumbnail-image-2",), as_link),
        FieldMapping("main_image_url", ("cover-image-2",), as_link),
        FieldMapping("video_url", ("video-link",), as_link),
        FieldMapping("button_text", ("button-text-2",)),
        LOCATION_NAME,
    ),
    detail_mappings=(
        FieldMapping("event_date", ("event-date", "start-date"), as_datetime),
        FieldMapping("end_date", ("end-date",), as_datetime),
        FieldMapping("playlist_url", ("playlist-link-2",), as_link),
        FieldMapping("event_url", ("event-link",), as_link),
    ),
    details_cls=InitiativeDetails,
    tag_fields=("initiative-tags-2",),
)


KIND_CONFIGS: Dict[ContentKind, KindSyncConfig] = {
    ContentKind.STORY: STORY_CONFIG,
    ContentKind.PLACE: PLACE_CONFIG,
    ContentKind.INITIATIVE: INITIATIVE_CONFIG,
}

# Los tags solo tienen nombre y slug
TAG_NAME = FieldMapping("name", ("name",), as_text)
TAG_SLUG = FieldMapping("slug", ("slug",), as_text)


def get_kind_config(kind: ContentKind) -> KindSyncConfig:
    """Retorna la configuración de mapeo del tipo indicado."""
    return KIND_CONFIGS[ContentKind(kind)]
