"""
Casos de uso de lectura: contenido del mapa, tags y detalle por slug.

Primero la base espejo; si falla o no tiene filas del tipo pedido, se lee
en vivo del CMS con el mismo mapper/resolver. Si ambos caminos fallan se
levanta ContentUnavailableException (nunca se devuelven datos truncados).
"""
from typing import Dict, List, Optional, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.content_sorting import sort_items
from app.application.services.tag_resolver import resolve_tags
from app.domain.entities.content import MapItem, Tag
from app.infrastructure.external.cms.cms_client import CmsApiError, CmsClient
from app.infrastructure.external.cms.field_mapper import map_item_to_draft, map_tag_item, slugify
from app.infrastructure.external.cms.sync_config import CollectionRegistry
from app.infrastructure.external.cms.table_mappings import get_kind_config
from app.infrastructure.repositories.content_repository import ContentRepository
from app.infrastructure.repositories.tag_repository import TagRepository
from app.shared.constants.content_constants import CONTENT_KIND_ORDER, ContentKind
from app.shared.exceptions.domain import EntityNotFoundException, InvalidItemException
from app.shared.exceptions.integration import ContentUnavailableException


class ContentUseCases:
    """
    Capa de lectura del espejo.

    client puede ser None (CMS no configurado): en ese caso solo se sirve
    lo que haya en la base.
    """

    def __init__(
        self,
        db: AsyncSession,
        client: Optional[CmsClient],
        registry: CollectionRegistry,
        *,
        check_range: bool = True,
    ):
        self.db = db
        self.client = client
        self.registry = registry
        self.check_range = check_range
        self.content = ContentRepository(db)
        self.tags = TagRepository(db)
        self._live_tags: Optional[Dict[str, Tag]] = None

    async def list_items(self, kind: ContentKind, tag_ids: Optional[Sequence[str]] = None) -> List[MapItem]:
        """
        Items de un tipo, filtrados por tags (OR) y ordenados según el tipo.
        """
        kind = ContentKind(kind)
        store_failed = False
        try:
            items = await self.content.list_entities(kind, tag_ids)
            if items or await self.content.count_entities(kind) > 0:
                return sort_items(kind, items)
            logger.info(f"Base sin filas de {kind.value}, leyendo del CMS")
        except SQLAlchemyError as e:
            store_failed = True
            await self.db.rollback()
            logger.error(f"Error leyendo {kind.value} de la base: {e}")

        items = await self._live_items(kind, store_failed)
        if tag_ids:
            items = [item for item in items if item.has_any_tag(list(tag_ids))]
        return sort_items(kind, items)

    async def list_map_items(
        self,
        kinds: Optional[Sequence[ContentKind]] = None,
        tag_ids: Optional[Sequence[str]] = None,
    ) -> List[MapItem]:
        """Items de varios tipos para el mapa (cada tipo con su propio orden)."""
        result: List[MapItem] = []
        for kind in kinds or CONTENT_KIND_ORDER:
            result.extend(await self.list_items(kind, tag_ids))
        return result

    async def list_tags(self) -> List[Tag]:
        """Todos los tags, por nombre."""
        store_failed = False
        try:
            tags = await self.tags.list_tags()
            if tags:
                return tags
        except SQLAlchemyError as e:
            store_failed = True
            await self.db.rollback()
            logger.error(f"Error leyendo tags de la base: {e}")

        lookup = await self._live_tag_lookup(store_failed)
        return sorted(lookup.values(), key=lambda tag: (tag.name.casefold(), tag.id))

    async def get_by_slug(self, slug: str, kind: Optional[ContentKind] = None) -> MapItem:
        """
        Detalle de un item por slug.

        Raises:
            EntityNotFoundException: ningún item con ese slug
            ContentUnavailableException: base y CMS fallaron
        """
        kinds = [ContentKind(kind)] if kind else list(CONTENT_KIND_ORDER)
        store_failed = False
        try:
            item = await self.content.get_by_slug(slug, kinds)
            if item is not None:
                return item
            has_rows = False
            for candidate in kinds:
                if await self.content.count_entities(candidate) > 0:
                    has_rows = True
                    break
            if has_rows:
                raise EntityNotFoundException("Item", slug)
        except SQLAlchemyError as e:
            store_failed = True
            await self.db.rollback()
            logger.error(f"Error buscando slug '{slug}' en la base: {e}")

        for candidate in kinds:
            for item in await self._live_items(candidate, store_failed):
                if item.slug == slug:
                    return item
        raise EntityNotFoundException("Item", slug)

    async def _live_items(self, kind: ContentKind, store_failed: bool) -> List[MapItem]:
        """Lectura en vivo del CMS (items mapeados con tags resueltos contra el CMS)."""
        collection_id = self.registry.content_collection(kind)
        if self.client is None or not self.client.is_configured or not collection_id:
            if store_failed:
                raise ContentUnavailableException(f"{kind.value} (CMS no configurado)")
            return []

        try:
            raw_items = await self.client.list_items(collection_id)
        except CmsApiError as e:
            logger.error(f"Fallback al CMS falló para {kind.value}: {e}")
            raise ContentUnavailableException(kind.value, details={"resource": kind.value, "cause": str(e)}) from e

        lookup = await self._live_tag_lookup(store_failed)
        config = get_kind_config(kind)
        items: List[MapItem] = []
        for raw in raw_items:
            try:
                draft = map_item_to_draft(raw, config, check_range=self.check_range)
            except InvalidItemException as e:
                logger.debug(f"{kind.value} omitido en lectura en vivo: {e.reason}")
                continue
            items.append(MapItem.from_draft(draft, resolve_tags(draft.tag_refs, lookup)))
        return items

    async def _live_tag_lookup(self, store_failed: bool) -> Dict[str, Tag]:
        """Tags leídos del CMS; en este modo el ID del tag es el ID del CMS."""
        if self._live_tags is not None:
            return self._live_tags

        if self.client is None or not self.client.is_configured:
            if store_failed:
                raise ContentUnavailableException("tags (CMS no configurado)")
            self._live_tags = {}
            return self._live_tags

        lookup: Dict[str, Tag] = {}
        for collection_id in self.registry.all_tag_collections():
            try:
                raw_items = await self.client.list_items(collection_id)
            except CmsApiError as e:
                logger.error(f"Fallback al CMS falló para tags ({collection_id}): {e}")
                raise ContentUnavailableException("tags", details={"resource": "tags", "cause": str(e)}) from e
            for raw in raw_items:
                try:
                    draft = map_tag_item(raw)
                except InvalidItemException:
                    continue
                lookup[draft.external_id] = Tag(
                    id=draft.external_id,
                    external_id=draft.external_id,
                    name=draft.name,
                    slug=draft.slug or slugify(draft.name),
                )
        self._live_tags = lookup
        return lookup
