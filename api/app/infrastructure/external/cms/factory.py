"""
Construcción del cliente y del registro de colecciones desde Settings.

Lo usan las dependencias de FastAPI y el script de sync completo.
"""

from __future__ import annotations

from typing import Optional

import httpx

from app.core.config import Settings

from .cms_client import CmsClient
from .sync_config import CollectionRegistry


def build_collection_registry(settings: Settings) -> CollectionRegistry:
    return CollectionRegistry.from_ids(
        stories=settings.CMS_STORIES_COLLECTION_ID,
        story_tags=settings.CMS_STORY_TAGS_COLLECTION_ID,
        places=settings.CMS_PLACES_COLLECTION_ID,
        place_tags=settings.CMS_PLACE_TAGS_COLLECTION_ID,
        initiatives=settings.CMS_INITIATIVES_COLLECTION_ID,
        initiative_tags=settings.CMS_INITIATIVE_TAGS_COLLECTION_ID,
    )


def build_cms_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CmsClient:
    """Cliente del CMS; el caller debe cerrarlo (`async with`)."""
    return CmsClient(
        settings.CMS_API_TOKEN,
        base_url=settings.CMS_API_BASE_URL,
        timeout_s=settings.CMS_TIMEOUT_S,
        max_retries=settings.CMS_MAX_RETRIES,
        page_size=settings.CMS_PAGE_SIZE,
        transport=transport,
    )
