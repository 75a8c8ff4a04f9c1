"""
Endpoints de lectura del contenido del mapa.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies.use_case_deps import get_content_use_cases
from app.application.dto.content_dto import (
    InitiativeDTO,
    MapItemDTO,
    PlaceDTO,
    StoryDTO,
    TagDTO,
    to_item_dto,
)
from app.application.use_cases.content_use_cases import ContentUseCases
from app.shared.constants.content_constants import ContentKind, parse_content_kinds
from app.shared.exceptions.domain import ValidationException


router = APIRouter(tags=["Content"])


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_kinds(raw: Optional[str]) -> List[ContentKind]:
    try:
        return parse_content_kinds(_split_csv(raw))
    except ValueError:
        raise ValidationException(f"Tipo de contenido invalido: {raw}", field="kinds") from None


@router.get("/stories", response_model=List[StoryDTO])
async def list_stories(
    tags: Optional[str] = Query(None, description="IDs de tags separados por coma (OR)"),
    use_cases: ContentUseCases = Depends(get_content_use_cases),
):
    """Historias, publicadas mas recientemente primero."""
    items = await use_cases.list_items(ContentKind.STORY, _split_csv(tags))
    return [to_item_dto(item) for item in items]


@router.get("/places", response_model=List[PlaceDTO])
async def list_places(
    tags: Optional[str] = Query(None, description="IDs de tags separados por coma (OR)"),
    use_cases: ContentUseCases = Depends(get_content_use_cases),
):
    """Lugares por titulo."""
    items = await use_cases.list_items(ContentKind.PLACE, _split_csv(tags))
    return [to_item_dto(item) for item in items]


@router.get("/initiatives", response_model=List[InitiativeDTO])
async def list_initiatives(
    tags: Optional[str] = Query(None, description="IDs de tags separados por coma (OR)"),
    use_cases: ContentUseCases = Depends(get_content_use_cases),
):
    """Iniciativas, evento mas proximo primero."""
    items = await use_cases.list_items(ContentKind.INITIATIVE, _split_csv(tags))
    return [to_item_dto(item) for item in items]


@router.get("/map-items", response_model=List[MapItemDTO])
async def list_map_items(
    kinds: Optional[str] = Query(None, description="Tipos separados por coma (story,place,initiative)"),
    tags: Optional[str] = Query(None, description="IDs de tags separados por coma (OR)"),
    use_cases: ContentUseCases = Depends(get_content_use_cases),
):
    """Items de varios tipos para pintar en el mapa."""
    items = await use_cases.list_map_items(_parse_kinds(kinds) or None, _split_csv(tags))
    return [to_item_dto(item) for item in items]


@router.get("/tags", response_model=List[TagDTO])
async def list_tags(use_cases: ContentUseCases = Depends(get_content_use_cases)):
    tags = await use_cases.list_tags()
    return [TagDTO.from_entity(tag) for tag in tags]


@router.get("/items/{slug}", response_model=MapItemDTO)
async def get_item_by_slug(
    slug: str,
    kind: Optional[ContentKind] = Query(None),
    use_cases: ContentUseCases = Depends(get_content_use_cases),
):
    """Detalle de un item por slug (404 si no existe)."""
    item = await use_cases.get_by_slug(slug, kind)
    return to_item_dto(item)
