"""
Caso de uso: aplicar un webhook del CMS (ya autenticado) a la base espejo.

routed -> applied -> acknowledged. Cualquier resultado que no sea un fallo
de la base se responde 200 para que el CMS no reintente en vano.
"""
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.tag_resolver import resolve_tags
from app.domain.entities.webhook import WebhookEvent, WebhookOutcome
from app.infrastructure.external.cms.field_mapper import map_item_to_draft, map_tag_item
from app.infrastructure.external.cms.sync_config import CollectionRegistry
from app.infrastructure.external.cms.table_mappings import get_kind_config
from app.infrastructure.external.cms.types import CmsItem
from app.infrastructure.repositories.content_repository import ContentRepository
from app.infrastructure.repositories.tag_repository import TagRepository
from app.shared.constants.content_constants import CollectionKind, ContentKind, WebhookOutcomeStatus
from app.shared.exceptions.domain import InvalidItemException
from app.shared.exceptions.integration import StoreUnavailableException


class WebhookUseCases:
    """Enruta un evento por collection_id y aplica un upsert o un delete."""

    def __init__(self, db: AsyncSession, registry: CollectionRegistry, *, check_range: bool = True):
        self.db = db
        self.registry = registry
        self.check_range = check_range
        self.tags = TagRepository(db)
        self.content = ContentRepository(db)

    async def handle_event(self, event: WebhookEvent) -> WebhookOutcome:
        """
        Aplica el evento.

        Raises:
            StoreUnavailableException: fallo de la base (el CMS debe reintentar)
        """
        target = self.registry.resolve(event.collection_id)
        if target is None:
            logger.info(f"Webhook de colección no seguida ({event.collection_id}), se ignora")
            return WebhookOutcome(WebhookOutcomeStatus.IGNORED, reason="unknown_collection")

        if not event.external_id:
            logger.warning(f"Webhook sin ID de item para {target.value}, se ignora")
            return WebhookOutcome(WebhookOutcomeStatus.IGNORED, target=target, reason="missing_id")

        try:
            if target == CollectionKind.TAG:
                outcome = await self._apply_tag(event)
            else:
                outcome = await self._apply_entity(ContentKind(target.value), event)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error de base de datos aplicando webhook {event.external_id}: {e}")
            raise StoreUnavailableException(
                details={"target": target.value, "external_id": event.external_id}
            ) from e

        logger.info(
            f"Webhook {event.event_type.value} {target.value} {event.external_id}: {outcome.status.value}"
        )
        return outcome

    async def _apply_tag(self, event: WebhookEvent) -> WebhookOutcome:
        if event.event_type.is_removal:
            await self.tags.delete_tag(event.external_id)
            return WebhookOutcome(WebhookOutcomeStatus.DELETED, CollectionKind.TAG, event.external_id)

        try:
            draft = map_tag_item(CmsItem(item_id=event.external_id, fields=event.fields or {}))
        except InvalidItemException as e:
            logger.warning(f"Tag omitido: {e.message}")
            return WebhookOutcome(WebhookOutcomeStatus.SKIPPED, CollectionKind.TAG, event.external_id, e.reason)

        await self.tags.upsert_tag(draft)
        return WebhookOutcome(WebhookOutcomeStatus.APPLIED, CollectionKind.TAG, event.external_id)

    async def _apply_entity(self, kind: ContentKind, event: WebhookEvent) -> WebhookOutcome:
        target = CollectionKind(kind.value)
        if event.event_type.is_removal:
            await self.content.delete_entity(kind, event.external_id)
            return WebhookOutcome(WebhookOutcomeStatus.DELETED, target, event.external_id)

        item = CmsItem(item_id=event.external_id, fields=event.fields or {})
        try:
            draft = map_item_to_draft(item, get_kind_config(kind), check_range=self.check_range)
        except InvalidItemException as e:
            logger.warning(f"{kind.value} omitido: {e.message}")
            return WebhookOutcome(WebhookOutcomeStatus.SKIPPED, target, event.external_id, e.reason)

        lookup = await self.tags.get_lookup(draft.tag_refs)
        result = await self.content.upsert_entity(draft, resolve_tags(draft.tag_refs, lookup))
        logger.debug(
            f"{kind.value} {event.external_id} {'creado' if result.created else 'actualizado'} "
            f"con {result.tag_count} tags"
        )
        return WebhookOutcome(WebhookOutcomeStatus.APPLIED, target, event.external_id)
