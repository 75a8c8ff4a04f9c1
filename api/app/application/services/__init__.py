"""
Servicios de aplicacion.

Contiene la logica de negocio reutilizable que no pertenece
a un caso de uso especifico.
"""
from app.application.services.tag_resolver import resolve_tags
from app.application.services.content_sorting import sort_items

__all__ = [
    # Sync
    "resolve_tags",
    # Lectura
    "sort_items",
]
