"""
Excepciones de dependencias externas: base de datos espejo y API del CMS.
"""
from typing import Any, Dict, Optional

from app.shared.exceptions.base import AppException


class StoreUnavailableException(AppException):
    """
    Fallo de la base de datos al aplicar un cambio (constraint, conexion...).

    En el webhook se traduce a 500 para que el CMS reintente la entrega.
    """

    def __init__(self, message: str = "Error de base de datos al aplicar el cambio", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORE_ERROR",
            details=details
        )


class ContentUnavailableException(AppException):
    """La base local y el fallback al CMS fallaron: no hay datos consistentes para servir."""

    def __init__(self, resource: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"No se pudo obtener {resource}",
            status_code=500,
            error_code="CONTENT_UNAVAILABLE",
            details=details or {"resource": resource}
        )
