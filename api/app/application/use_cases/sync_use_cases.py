"""
Caso de uso: sync completo CMS -> base espejo (reconciliación).

Diseño (resumen):
- Tags primero (las entidades los referencian), luego cada tipo de contenido
- Un único pipeline genérico por tipo, parametrizado por KindSyncConfig
- Commit por item: una corrida parcial deja los items ya procesados en su lugar
- Modo additive (nunca borra) o mirror (borra lo que no vino en el listado completo)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Set

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.tag_resolver import resolve_tags
from app.infrastructure.external.cms.cms_client import CmsApiError, CmsClient
from app.infrastructure.external.cms.field_mapper import map_item_to_draft, map_tag_item
from app.infrastructure.external.cms.sync_config import CollectionRegistry
from app.infrastructure.external.cms.table_mappings import get_kind_config
from app.infrastructure.repositories.content_repository import ContentRepository
from app.infrastructure.repositories.tag_repository import TagRepository
from app.shared.constants.content_constants import CONTENT_KIND_ORDER, ContentKind, ReconcileMode
from app.shared.exceptions.domain import InvalidItemException


@dataclass
class KindSyncReport:
    """Contadores de una colección (o del conjunto de colecciones de tags)."""

    processed: int = 0
    skipped: int = 0
    failed: int = 0
    deleted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def counts(self) -> Dict[str, int]:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "failed": self.failed,
            "deleted": self.deleted,
        }


@dataclass
class FullSyncReport:
    mode: ReconcileMode
    tags: KindSyncReport = field(default_factory=KindSyncReport)
    kinds: Dict[ContentKind, KindSyncReport] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True si ninguna colección abortó por error del CMS."""
        return self.tags.ok and all(report.ok for report in self.kinds.values())

    def per_kind_counts(self) -> Dict[str, Dict[str, int]]:
        counts = {"tag": self.tags.counts()}
        for kind, report in self.kinds.items():
            counts[kind.value] = report.counts()
        return counts

    def errors(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        if self.tags.error:
            errors["tag"] = self.tags.error
        for kind, report in self.kinds.items():
            if report.error:
                errors[kind.value] = report.error
        return errors


class SyncUseCases:
    """
    Orquestador del sync completo.

    Las dependencias (sesión, cliente, registro de colecciones) llegan
    explícitas; este caso de uso no lee settings globales.
    """

    def __init__(
        self,
        db: AsyncSession,
        client: CmsClient,
        registry: CollectionRegistry,
        *,
        mode: ReconcileMode = ReconcileMode.ADDITIVE,
        check_range: bool = True,
    ):
        self.db = db
        self.client = client
        self.registry = registry
        self.mode = ReconcileMode(mode)
        self.check_range = check_range
        self.tags = TagRepository(db)
        self.content = ContentRepository(db)

    async def run_full_sync(self, kinds: Optional[Sequence[ContentKind]] = None) -> FullSyncReport:
        """
        Ejecuta la reconciliación completa.

        Args:
            kinds: tipos de contenido a sincronizar (default: todos los configurados).
                Los tags se sincronizan siempre.

        Returns:
            FullSyncReport: contadores por tipo y errores por colección
        """
        report = FullSyncReport(mode=self.mode)
        logger.info(f"Sync completo iniciado (modo={self.mode.value})")

        report.tags = await self._sync_tags()

        wanted = [ContentKind(kind) for kind in kinds] if kinds else list(CONTENT_KIND_ORDER)
        for kind in wanted:
            collection_id = self.registry.content_collection(kind)
            if not collection_id:
                logger.warning(f"Colección de {kind.value} no configurada, se omite")
                continue
            report.kinds[kind] = await self._sync_kind(kind, collection_id)

        if report.success:
            logger.success(f"Sync completo finalizado: {report.per_kind_counts()}")
        else:
            logger.error(f"Sync completo con errores: {report.errors()}")
        return report

    async def _sync_tags(self) -> KindSyncReport:
        report = KindSyncReport()
        listed: Set[str] = set()
        complete = True

        for collection_id in self.registry.all_tag_collections():
            try:
                items = await self.client.list_items(collection_id)
            except CmsApiError as e:
                logger.error(f"No se pudo listar la colección de tags {collection_id}: {e}")
                report.error = str(e)
                complete = False
                continue

            for item in items:
                listed.add(item.item_id)
                try:
                    draft = map_tag_item(item)
                except InvalidItemException as e:
                    logger.warning(f"Tag omitido: {e.message}")
                    report.skipped += 1
                    continue
                if await self._commit_step(lambda: self.tags.upsert_tag(draft), item.item_id):
                    report.processed += 1
                else:
                    report.failed += 1

        if self.mode == ReconcileMode.MIRROR and complete:
            report.deleted = await self._prune(lambda: self.tags.prune_missing(listed), "tag")
        return report

    async def _sync_kind(self, kind: ContentKind, collection_id: str) -> KindSyncReport:
        report = KindSyncReport()
        config = get_kind_config(kind)

        try:
            items = await self.client.list_items(collection_id)
        except CmsApiError as e:
            logger.error(f"No se pudo listar la colección de {kind.value} ({collection_id}): {e}")
            report.error = str(e)
            return report

        lookup = await self.tags.get_lookup()
        logger.info(f"{kind.value}: {len(items)} items en el CMS")

        for item in items:
            try:
                draft = map_item_to_draft(item, config, check_range=self.check_range)
            except InvalidItemException as e:
                logger.warning(f"{kind.value} omitido: {e.message}")
                report.skipped += 1
                continue

            tags = resolve_tags(draft.tag_refs, lookup)
            if await self._commit_step(lambda: self.content.upsert_entity(draft, tags), item.item_id):
                report.processed += 1
            else:
                report.failed += 1

        if self.mode == ReconcileMode.MIRROR:
            listed = [item.item_id for item in items]
            report.deleted = await self._prune(
                lambda: self.content.prune_missing(kind, listed), kind.value
            )
        return report

    async def _commit_step(self, step, external_id: str) -> bool:
        """Ejecuta una escritura y la commitea; un fallo de la base se aísla al item."""
        try:
            await step()
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error de base de datos en item {external_id}: {e}")
            return False

    async def _prune(self, step, label: str) -> int:
        try:
            deleted = await step()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error podando {label}: {e}")
            return 0
        if deleted:
            logger.info(f"{label}: {deleted} filas borradas (modo mirror)")
        return deleted
