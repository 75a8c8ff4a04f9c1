"""
Excepciones relacionadas con autenticación y autorización.
"""
from app.shared.exceptions.base import AppException


class AuthException(AppException):
    """Excepción base para errores de autenticación."""

    def __init__(self, message: str, error_code: str = "AUTH_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details
        )


class UnauthorizedException(AuthException):
    """Excepción para acceso no autorizado."""

    def __init__(self, message: str = "No autorizado"):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED"
        )


class WebhookAuthException(AuthException):
    """
    Webhook rechazado: faltan headers, firma invalida o timestamp vencido.

    El CMS no reintenta ante un 401.
    """

    MISSING_HEADERS = "missing_headers"
    INVALID_SIGNATURE = "invalid_signature"
    STALE_TIMESTAMP = "stale_timestamp"
    INVALID_TIMESTAMP = "invalid_timestamp"

    def __init__(self, reason: str):
        super().__init__(
            message=f"Webhook rechazado: {reason}",
            error_code="WEBHOOK_UNAUTHORIZED",
            details={"reason": reason}
        )
        self.reason = reason
