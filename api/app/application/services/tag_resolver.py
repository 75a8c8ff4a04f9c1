"""
Resolución de referencias de tags del CMS a tags locales.

Una referencia que no resuelve no es un error: el tag puede no haberse
sincronizado todavía (orden eventual de webhooks) o haber sido borrado.
"""
from typing import Any, Iterable, List, Mapping

from loguru import logger

from app.domain.entities.content import Tag


def resolve_tags(tag_refs: Iterable[Any], lookup: Mapping[str, Tag]) -> List[Tag]:
    """
    Mapea IDs externos de tags a Tag, en el orden de entrada.

    - Descarta en silencio referencias que no resuelven o que no son string.
    - Deduplica: un tag repetido en el CMS produce una sola fila de junction.

    Args:
        tag_refs: IDs externos de tags tal como vienen en el item
        lookup: tabla external_id -> Tag

    Returns:
        List[Tag]: tags resueltos
    """
    resolved: List[Tag] = []
    seen = set()
    for ref in tag_refs:
        if not isinstance(ref, str):
            continue
        tag = lookup.get(ref)
        if tag is None:
            logger.debug(f"Referencia de tag sin resolver: {ref}")
            continue
        if tag.id in seen:
            continue
        seen.add(tag.id)
        resolved.append(tag)
    return resolved
