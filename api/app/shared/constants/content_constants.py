"""
Constantes relacionadas con el contenido espejado del CMS.
"""
from enum import Enum
from typing import Iterable, List, Optional


class ContentKind(str, Enum):
    """Tipos de contenido con punto en el mapa."""
    STORY = "story"
    PLACE = "place"
    INITIATIVE = "initiative"


class CollectionKind(str, Enum):
    """Destino de una coleccion del CMS (tipos de contenido + tags)."""
    STORY = "story"
    PLACE = "place"
    INITIATIVE = "initiative"
    TAG = "tag"


class WebhookEventType(str, Enum):
    """Tipos de evento de webhook normalizados."""
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"
    UNPUBLISHED = "unpublished"

    @property
    def is_removal(self) -> bool:
        """True si el evento implica borrar el item del espejo."""
        return self in (WebhookEventType.DELETED, WebhookEventType.UNPUBLISHED)


class ReconcileMode(str, Enum):
    """
    Estrategia del sync completo frente a filas locales ausentes del listado.

    - additive: nunca borra (solo crea/actualiza)
    - mirror: borra filas cuyo external_id no aparece en el listado completo
    """
    ADDITIVE = "additive"
    MIRROR = "mirror"


class WebhookOutcomeStatus(str, Enum):
    """Resultado de procesar un webhook aceptado."""
    APPLIED = "applied"
    DELETED = "deleted"
    SKIPPED = "skipped"
    IGNORED = "ignored"


# Orden estable para iterar tipos (sync completo, busqueda por slug)
CONTENT_KIND_ORDER = (ContentKind.STORY, ContentKind.PLACE, ContentKind.INITIATIVE)

# Prefijo de los trigger types originales del CMS (collection_item_created, ...)
CMS_TRIGGER_PREFIX = "collection_item_"


def parse_content_kinds(names: Optional[Iterable[str]]) -> List[ContentKind]:
    """
    Convierte nombres de tipo ('story', 'places', 'initiatives'...) en ContentKind.

    Acepta singular o plural, ignora vacíos y duplicados.

    Raises:
        ValueError: nombre que no corresponde a ningún tipo
    """
    kinds: List[ContentKind] = []
    for name in names or []:
        name = name.strip().lower()
        if not name:
            continue
        if name.endswith("ies"):
            name = name[:-3] + "y"
        elif name.endswith("s"):
            name = name[:-1]
        kind = ContentKind(name)
        if kind not in kinds:
            kinds.append(kind)
    return kinds
