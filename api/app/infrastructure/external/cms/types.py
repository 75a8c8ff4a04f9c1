"""
Tipos y utilidades puras para el pipeline CMS -> base espejo.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Tuple

from app.shared.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class CmsItem:
    """Item de colección del CMS: ID estable + bolsa de campos sin tipar."""

    item_id: str
    fields: Mapping[str, Any]


Transform = Callable[[Any], Any]


def as_text(value: Any) -> Optional[str]:
    """Texto plano; strings vacíos o tipos no escalares se tratan como ausentes."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def as_link(value: Any) -> Optional[str]:
    """
    Normaliza un campo link/imagen.

    El CMS entrega estos campos como string simple o como objeto con
    propiedad `url` ({"url": "...", "alt": ...}); ambos quedan como str | None.
    """
    if isinstance(value, Mapping):
        return as_text(value.get("url"))
    return as_text(value)


def as_datetime(value: Any) -> Optional[datetime]:
    """Fecha ISO-8601 -> datetime UTC. Un valor no parseable queda en None (no rechaza el item)."""
    return DateTimeUtils.from_iso_string(value)


def first_present(fields: Mapping[str, Any], names: Tuple[str, ...]) -> Any:
    """
    Retorna el valor del primer nombre de campo presente y no vacío.

    Permite convivir con variantes del esquema del CMS (p.ej. 'cover-image'
    vs 'thumbnail') durante migraciones de colección.
    """
    for name in names:
        value = fields.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, Mapping) and not value.get("url"):
            continue
        return value
    return None


@dataclass(frozen=True)
class FieldMapping:
    """
    Define el mapeo de un campo del CMS a una columna local.

    - column: nombre de la columna / atributo del borrador
    - cms_fields: variantes de nombre del field en el CMS, en orden de preferencia
    - transform: función para normalizar el valor antes de persistir
    """

    column: str
    cms_fields: Tuple[str, ...]
    transform: Transform = as_text

    def extract(self, fields: Mapping[str, Any]) -> Any:
        raw = first_present(fields, self.cms_fields)
        if raw is None:
            return None
        return self.transform(raw)


@dataclass(frozen=True)
class CoordinateFields:
    """
    Nombres de campo de coordenadas de un tipo.

    - combined: campo "lat, lng" (formato Google Maps); tiene precedencia
    - latitude / longitude: campos discretos (esquema anterior)
    """

    combined: Tuple[str, ...] = ("location-coordinates",)
    latitude: Tuple[str, ...] = ("latitude-2", "latitude")
    longitude: Tuple[str, ...] = ("longitude-2", "longitude")
