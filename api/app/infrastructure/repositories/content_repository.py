"""
Repositorio de contenido (story / place / initiative).

Un solo repositorio para los tres tipos: la tabla y la junction se eligen
con ENTITY_TABLES según el `kind` del borrador.
"""
from collections import defaultdict
from dataclasses import fields
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.content import DETAILS_BY_KIND, EntityDraft, MapItem, Tag, UpsertResult
from app.infrastructure.database.models import ENTITY_TABLES, EntityTable, TagModel
from app.shared.constants.content_constants import CONTENT_KIND_ORDER, ContentKind
from app.shared.utils.datetime_utils import DateTimeUtils


def _utc_or_none(value):
    return DateTimeUtils.ensure_utc(value) if value is not None else None


class ContentRepository:
    """
    Upsert idempotente por external_id y lecturas del espejo.

    Cada escritura de entidad (fila + reemplazo de junction) corre en su
    propio savepoint; el commit lo decide el caller.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------

    async def upsert_entity(self, draft: EntityDraft, tags: Sequence[Tag]) -> UpsertResult:
        """
        Crea o actualiza la entidad y reemplaza por completo sus tags.

        - Lookup por external_id: update conserva id y created_at, refresca updated_at.
        - Insert genera un UUID nuevo.
        - Junction: delete-all + insert del set actual (un set vacío deja cero filas).
        - Violación de unique en el insert (webhook concurrente para el mismo
          item): rollback del savepoint y un reintento como update.
        """
        table = ENTITY_TABLES[draft.kind]
        try:
            async with self.db.begin_nested():
                result = await self._write(table, draft, tags)
        except IntegrityError:
            logger.warning(
                f"Carrera de insert en {draft.kind.value} {draft.external_id}, reintentando como update"
            )
            async with self.db.begin_nested():
                result = await self._write(table, draft, tags)
        return result

    async def delete_entity(self, kind: ContentKind, external_id: str) -> bool:
        """
        Borra una entidad y sus filas junction.

        Returns:
            bool: True si existía
        """
        table = ENTITY_TABLES[ContentKind(kind)]
        row = await self._get_row(table, external_id)
        if row is None:
            return False
        async with self.db.begin_nested():
            await self.db.execute(delete(table.junction).where(table.owner_attr == row.id))
            await self.db.delete(row)
        return True

    async def prune_missing(self, kind: ContentKind, keep_external_ids: Iterable[str]) -> int:
        """Borra las entidades del tipo cuyo external_id no fue listado."""
        table = ENTITY_TABLES[ContentKind(kind)]
        keep = set(keep_external_ids)
        result = await self.db.execute(select(table.model.external_id))
        stale = [external_id for external_id in result.scalars().all() if external_id not in keep]
        deleted = 0
        for external_id in stale:
            if await self.delete_entity(kind, external_id):
                deleted += 1
        return deleted

    async def _get_row(self, table: EntityTable, external_id: str):
        result = await self.db.execute(
            select(table.model).where(table.model.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def _write(self, table: EntityTable, draft: EntityDraft, tags: Sequence[Tag]) -> UpsertResult:
        now = DateTimeUtils.now_utc()
        row = await self._get_row(table, draft.external_id)
        created = row is None

        if created:
            row = table.model(
                external_id=draft.external_id,
                created_at=now,
                updated_at=now,
                **draft.column_values(),
            )
            self.db.add(row)
        else:
            for column, value in draft.column_values().items():
                setattr(row, column, value)
            row.updated_at = now
        await self.db.flush()

        await self.db.execute(delete(table.junction).where(table.owner_attr == row.id))
        tag_ids = list(dict.fromkeys(tag.id for tag in tags))
        if tag_ids:
            await self.db.execute(
                insert(table.junction),
                [{table.owner_column: row.id, "tag_id": tag_id} for tag_id in tag_ids],
            )

        return UpsertResult(entity_id=row.id, created=created, tag_count=len(tag_ids))

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    async def list_entities(
        self,
        kind: ContentKind,
        tag_ids: Optional[Sequence[str]] = None,
    ) -> List[MapItem]:
        """
        Entidades de un tipo con sus tags, sin ordenar.

        tag_ids: filtro OR; un ID coincide con el ID local o el externo del tag.
        """
        kind = ContentKind(kind)
        table = ENTITY_TABLES[kind]
        query = select(table.model)
        if tag_ids:
            tagged = (
                select(table.owner_attr)
                .join(TagModel, TagModel.id == table.junction.tag_id)
                .where(or_(TagModel.id.in_(tag_ids), TagModel.external_id.in_(tag_ids)))
            )
            query = query.where(table.model.id.in_(tagged))

        result = await self.db.execute(query)
        rows = result.scalars().all()
        tags_by_owner = await self._load_tags(table, [row.id for row in rows])
        return [self._to_item(kind, row, tags_by_owner.get(row.id, [])) for row in rows]

    async def count_entities(self, kind: ContentKind) -> int:
        table = ENTITY_TABLES[ContentKind(kind)]
        result = await self.db.execute(select(func.count()).select_from(table.model))
        return int(result.scalar_one())

    async def get_by_external_id(self, kind: ContentKind, external_id: str) -> Optional[MapItem]:
        kind = ContentKind(kind)
        table = ENTITY_TABLES[kind]
        row = await self._get_row(table, external_id)
        if row is None:
            return None
        tags_by_owner = await self._load_tags(table, [row.id])
        return self._to_item(kind, row, tags_by_owner.get(row.id, []))

    async def get_by_slug(
        self,
        slug: str,
        kinds: Sequence[ContentKind] = CONTENT_KIND_ORDER,
    ) -> Optional[MapItem]:
        """Primer item con ese slug, buscando en los tipos en el orden dado."""
        for kind in kinds:
            kind = ContentKind(kind)
            table = ENTITY_TABLES[kind]
            result = await self.db.execute(
                select(table.model).where(table.model.slug == slug).order_by(table.model.created_at).limit(1)
            )
            row = result.scalar_one_or_none()
            if row is not None:
                tags_by_owner = await self._load_tags(table, [row.id])
                return self._to_item(kind, row, tags_by_owner.get(row.id, []))
        return None

    async def _load_tags(self, table: EntityTable, owner_ids: List[str]) -> Dict[str, List[Tag]]:
        if not owner_ids:
            return {}
        result = await self.db.execute(
            select(table.owner_attr, TagModel)
            .join(TagModel, TagModel.id == table.junction.tag_id)
            .where(table.owner_attr.in_(owner_ids))
            .order_by(TagModel.name)
        )
        tags_by_owner: Dict[str, List[Tag]] = defaultdict(list)
        for owner_id, tag in result.all():
            tags_by_owner[owner_id].append(
                Tag(id=tag.id, external_id=tag.external_id, name=tag.name, slug=tag.slug)
            )
        return tags_by_owner

    @staticmethod
    def _to_item(kind: ContentKind, row, tags: List[Tag]) -> MapItem:
        details_cls = DETAILS_BY_KIND[kind]
        details_values = {}
        for detail_field in fields(details_cls):
            value = getattr(row, detail_field.name)
            if detail_field.name.endswith(("_at", "_date")):
                value = _utc_or_none(value)
            details_values[detail_field.name] = value

        return MapItem(
            id=row.id,
            external_id=row.external_id,
            kind=kind,
            title=row.title,
            latitude=row.latitude,
            longitude=row.longitude,
            details=details_cls(**details_values),
            slug=row.slug,
            description=row.description,
            thumbnail_url=row.thumbnail_url,
            main_image_url=row.main_image_url,
            video_url=row.video_url,
            button_text=row.button_text,
            location_name=row.location_name,
            created_at=_utc_or_none(row.created_at),
            updated_at=_utc_or_none(row.updated_at),
            tags=tags,
        )
