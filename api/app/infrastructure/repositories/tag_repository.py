"""
Repositorio de tags compartidos.
"""
from typing import Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.content import Tag, TagDraft
from app.infrastructure.database.models import JUNCTION_MODELS, TagModel
from app.shared.utils.datetime_utils import DateTimeUtils


def _to_entity(row: TagModel) -> Tag:
    return Tag(id=row.id, external_id=row.external_id, name=row.name, slug=row.slug)


class TagRepository:
    """
    Gestiona la tabla tag y la limpieza de sus filas junction.

    No hace commit: el caller decide el límite de la transacción.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_lookup(self, external_ids: Optional[Iterable[str]] = None) -> Dict[str, Tag]:
        """
        Tabla external_id -> Tag para el resolver.

        Con `external_ids` solo carga esos tags (webhook de un item).
        """
        query = select(TagModel)
        if external_ids is not None:
            query = query.where(TagModel.external_id.in_(list(external_ids)))
        result = await self.db.execute(query)
        return {row.external_id: _to_entity(row) for row in result.scalars().all()}

    async def list_tags(self) -> List[Tag]:
        result = await self.db.execute(select(TagModel).order_by(TagModel.name, TagModel.id))
        return [_to_entity(row) for row in result.scalars().all()]

    async def get_by_external_id(self, external_id: str) -> Optional[Tag]:
        row = await self._get_row(external_id)
        return _to_entity(row) if row else None

    async def upsert_tag(self, draft: TagDraft) -> Tag:
        """
        Crea o actualiza un tag por external_id dentro de un savepoint.

        Si un insert concurrente gana la carrera (violación de unique),
        se reintenta una vez como update.
        """
        try:
            async with self.db.begin_nested():
                row = await self._write(draft)
        except IntegrityError:
            logger.warning(f"Carrera de insert en tag {draft.external_id}, reintentando como update")
            async with self.db.begin_nested():
                row = await self._write(draft)
        return _to_entity(row)

    async def delete_tag(self, external_id: str) -> bool:
        """
        Borra un tag y sus filas junction en los tres tipos.

        Returns:
            bool: True si existía
        """
        row = await self._get_row(external_id)
        if row is None:
            return False
        async with self.db.begin_nested():
            for junction in JUNCTION_MODELS:
                await self.db.execute(delete(junction).where(junction.tag_id == row.id))
            await self.db.delete(row)
        return True

    async def prune_missing(self, keep_external_ids: Iterable[str]) -> int:
        """Borra los tags cuyo external_id no está en `keep_external_ids`."""
        keep = set(keep_external_ids)
        result = await self.db.execute(select(TagModel.external_id))
        stale = [external_id for external_id in result.scalars().all() if external_id not in keep]
        deleted = 0
        for external_id in stale:
            if await self.delete_tag(external_id):
                deleted += 1
        return deleted

    async def _get_row(self, external_id: str) -> Optional[TagModel]:
        result = await self.db.execute(select(TagModel).where(TagModel.external_id == external_id))
        return result.scalar_one_or_none()

    async def _write(self, draft: TagDraft) -> TagModel:
        now = DateTimeUtils.now_utc()
        row = await self._get_row(draft.external_id)
        if row is None:
            row = TagModel(
                external_id=draft.external_id,
                name=draft.name,
                slug=draft.slug,
                created_at=now,
                updated_at=now,
            )
            self.db.add(row)
        else:
            row.name = draft.name
            row.slug = draft.slug
            row.updated_at = now
        await self.db.flush()
        return row
