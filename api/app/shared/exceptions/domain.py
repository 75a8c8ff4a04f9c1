"""
Excepciones relacionadas con la lógica de dominio.
"""
from typing import Any, Optional

from app.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepción cuando no se encuentra una entidad."""

    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} con ID {entity_id} no encontrado",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class ValidationException(DomainException):
    """Excepción para errores de validación."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class InvalidItemException(DomainException):
    """
    Item del CMS que no se puede representar en el espejo
    (falta el titulo, coordenadas invalidas, etc).

    Es un fallo de calidad de datos: quien lo captura omite el item
    y continua con el resto del lote.
    """

    MISSING_TITLE = "missing_title"
    MISSING_NAME = "missing_name"
    INVALID_COORDINATES = "invalid_coordinates"
    MISSING_ID = "missing_id"

    def __init__(self, reason: str, external_id: Optional[str] = None):
        super().__init__(
            message=f"Item '{external_id}' rechazado: {reason}",
            error_code="INVALID_ITEM",
            details={"reason": reason, "external_id": external_id}
        )
        self.reason = reason
        self.external_id = external_id
