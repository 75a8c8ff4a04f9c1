"""
Mapeo puro CMS -> borradores tipados.

- parse_coordinates: (lat, lng) desde "lat, lng" o desde dos campos discretos
- map_item_to_draft: item del CMS -> EntityDraft del tipo configurado
- map_tag_item: item de una colección de tags -> TagDraft

Sin I/O: lo usan el webhook, el sync completo y el fallback de lectura.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Tuple

from app.domain.entities.content import Coordinates, EntityDraft, TagDraft
from app.shared.exceptions.domain import InvalidItemException

from .sync_config import KindSyncConfig
from .table_mappings import TAG_NAME, TAG_SLUG
from .types import CmsItem, CoordinateFields, first_present


def _parse_number(value: Any) -> Optional[float]:
    """Número finito desde str o int/float; bool y demás tipos no cuentan como número."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _in_range(coords: Coordinates) -> bool:
    return -90.0 <= coords.latitude <= 90.0 and -180.0 <= coords.longitude <= 180.0


def parse_coordinates(
    fields: Mapping[str, Any],
    coordinate_fields: CoordinateFields = CoordinateFields(),
    *,
    check_range: bool = True,
) -> Optional[Coordinates]:
    """
    Extrae coordenadas de la bolsa de campos.

    Reglas:
    - Si el campo combinado ("52.09, 4.27") está presente y es válido tiene
      precedencia: exactamente dos partes numéricas.
    - Si falta o no es válido, se usan los dos campos discretos (string o
      número); un esquema a medio migrar conserva así las coordenadas legacy.
    - check_range: rechaza latitudes fuera de ±90 y longitudes fuera de ±180.

    Returns:
        Coordinates o None si el item no tiene coordenadas válidas.
    """
    combined = _parse_combined(first_present(fields, coordinate_fields.combined))
    if combined is not None and (not check_range or _in_range(combined)):
        return combined

    raw_lat = first_present(fields, coordinate_fields.latitude)
    raw_lng = first_present(fields, coordinate_fields.longitude)
    if raw_lat is None or raw_lng is None:
        return None
    lat, lng = _parse_number(raw_lat), _parse_number(raw_lng)
    if lat is None or lng is None:
        return None

    coords = Coordinates(latitude=lat, longitude=lng)
    if check_range and not _in_range(coords):
        return None
    return coords


def _parse_combined(combined: Any) -> Optional[Coordinates]:
    if not isinstance(combined, str):
        return None
    parts = [part.strip() for part in combined.split(",")]
    if len(parts) != 2:
        return None
    lat, lng = _parse_number(parts[0]), _parse_number(parts[1])
    if lat is None or lng is None:
        return None
    return Coordinates(latitude=lat, longitude=lng)


def extract_tag_refs(fields: Mapping[str, Any], tag_fields: Tuple[str, ...]) -> Tuple[str, ...]:
    """
    Referencias de tags (IDs externos) del primer field de tags presente.

    Acepta lista de IDs o un único ID como string; las referencias no-string
    se descartan aquí (el resolver descarta además las que no existen).
    """
    raw = first_present(fields, tag_fields)
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(ref.strip() for ref in raw if isinstance(ref, str) and ref.strip())


def map_item_to_draft(
    item: CmsItem,
    config: KindSyncConfig,
    *,
    check_range: bool = True,
) -> EntityDraft:
    """
    Mapea un item del CMS a un EntityDraft del tipo de `config`.

    Raises:
        InvalidItemException: sin título o sin coordenadas válidas.
            El caller debe omitir el item, no fallar el lote.
    """
    if not item.item_id:
        raise InvalidItemException(InvalidItemException.MISSING_ID)

    fields = item.fields or {}

    title = config.title.extract(fields)
    if not title:
        raise InvalidItemException(InvalidItemException.MISSING_TITLE, item.item_id)

    coords = parse_coordinates(fields, config.coordinates, check_range=check_range)
    if coords is None:
        raise InvalidItemException(InvalidItemException.INVALID_COORDINATES, item.item_id)

    common = {m.column: m.extract(fields) for m in config.common_mappings}
    details = config.details_cls(**{m.column: m.extract(fields) for m in config.detail_mappings})

    return EntityDraft(
        kind=config.kind,
        external_id=item.item_id,
        title=title,
        latitude=coords.latitude,
        longitude=coords.longitude,
        details=details,
        tag_refs=extract_tag_refs(fields, config.tag_fields),
        **common,
    )


def map_tag_item(item: CmsItem) -> TagDraft:
    """
    Mapea un item de una colección de tags.

    Raises:
        InvalidItemException: item sin ID o sin nombre.
    """
    if not item.item_id:
        raise InvalidItemException(InvalidItemException.MISSING_ID)
    name = TAG_NAME.extract(item.fields or {})
    if not name:
        raise InvalidItemException(InvalidItemException.MISSING_NAME, item.item_id)
    return TagDraft(
        external_id=item.item_id,
        name=name,
        slug=TAG_SLUG.extract(item.fields or {}),
    )


def slugify(name: str) -> str:
    """Slug simple (minúsculas, espacios -> '-') para tags sin slug en modo fallback."""
    return "-".join(name.lower().split())
