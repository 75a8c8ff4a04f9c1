"""
Orden de presentacion por tipo de contenido.

Se aplica igual a los datos de la base espejo y a los del fallback al CMS,
para que ambos caminos devuelvan el mismo orden.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from app.domain.entities.content import MapItem
from app.shared.constants.content_constants import ContentKind

# Fechas nulas al final en ambos sentidos de orden
_FAR_PAST = datetime.min.replace(tzinfo=timezone.utc)
_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _story_key(item: MapItem) -> Tuple:
    # Se usa con reverse=True: fechados primero, el mas reciente arriba
    published = item.details.published_at
    return (published is not None, published or _FAR_PAST)


def _place_key(item: MapItem) -> Tuple:
    return (item.title.casefold(), item.title)


def _initiative_key(item: MapItem) -> Tuple:
    event_date = item.details.event_date
    return (event_date is None, event_date or _FAR_FUTURE, item.title.casefold())


_SORTERS: Dict[ContentKind, Tuple[Callable[[MapItem], Tuple], bool]] = {
    ContentKind.STORY: (_story_key, True),
    ContentKind.PLACE: (_place_key, False),
    ContentKind.INITIATIVE: (_initiative_key, False),
}


def sort_items(kind: ContentKind, items: List[MapItem]) -> List[MapItem]:
    """
    Ordena items de un tipo.

    - Story: publicacion mas reciente primero (sin fecha al final)
    - Place: titulo alfabetico (sin distinguir mayusculas)
    - Initiative: evento mas proximo primero (sin fecha al final, luego titulo)
    """
    key, reverse = _SORTERS[ContentKind(kind)]
    return sorted(items, key=key, reverse=reverse)
