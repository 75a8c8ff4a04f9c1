"""
Utilidades de seguridad: firma de webhooks y token del trigger de sync.
"""
import hashlib
import hmac
from datetime import datetime
from typing import Callable, Mapping, Optional

from loguru import logger

from app.shared.exceptions.auth import UnauthorizedException, WebhookAuthException
from app.shared.utils.datetime_utils import DateTimeUtils


def compute_signature(secret: str, timestamp: str, raw_body: bytes) -> str:
    """
    Firma hex HMAC-SHA256 sobre "{timestamp}:{rawBody}".

    Args:
        secret: Secreto compartido con el CMS
        timestamp: Valor tal cual llega en el header de timestamp
        raw_body: Cuerpo crudo del request (antes de parsear JSON)

    Returns:
        str: Digest hexadecimal
    """
    message = timestamp.encode("utf-8") + b":" + raw_body
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class WebhookSignatureVerifier:
    """
    Autentica webhooks del CMS (firma + frescura del timestamp).

    Sin secreto configurado los requests se aceptan sin verificar; es una
    decisión del operador y se advierte en el log en cada request.
    """

    def __init__(
        self,
        secret: Optional[str],
        *,
        timestamp_header: str = "x-webflow-timestamp",
        signature_header: str = "x-webflow-signature",
        max_age_s: int = 300,
        clock: Callable[[], datetime] = DateTimeUtils.now_utc,
    ):
        self.secret = secret or ""
        self.timestamp_header = timestamp_header.lower()
        self.signature_header = signature_header.lower()
        self.max_age_s = max_age_s
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def verify(self, headers: Mapping[str, str], raw_body: bytes) -> None:
        """
        Valida headers y firma.

        Raises:
            WebhookAuthException: headers faltantes, timestamp invalido o
                vencido, o firma que no coincide
        """
        if not self.enabled:
            logger.warning("CMS_WEBHOOK_SECRET no configurado: webhook aceptado sin verificar firma")
            return

        lowered = {key.lower(): value for key, value in headers.items()}
        timestamp = lowered.get(self.timestamp_header)
        signature = lowered.get(self.signature_header)
        if not timestamp or not signature:
            raise WebhookAuthException(WebhookAuthException.MISSING_HEADERS)

        sent_at = DateTimeUtils.from_epoch(timestamp)
        if sent_at is None:
            raise WebhookAuthException(WebhookAuthException.INVALID_TIMESTAMP)

        age_s = (self._clock() - sent_at).total_seconds()
        if abs(age_s) > self.max_age_s:
            raise WebhookAuthException(WebhookAuthException.STALE_TIMESTAMP)

        expected = compute_signature(self.secret, timestamp, raw_body)
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            raise WebhookAuthException(WebhookAuthException.INVALID_SIGNATURE)


def verify_bearer_token(authorization: Optional[str], expected_token: Optional[str]) -> None:
    """
    Valida un header `Authorization: Bearer <token>` en tiempo constante.

    Raises:
        UnauthorizedException: header ausente, mal formado o token distinto.
            Un token esperado vacío rechaza siempre.
    """
    if not expected_token:
        raise UnauthorizedException("Trigger de sync sin token configurado")
    if not authorization:
        raise UnauthorizedException("Falta header Authorization")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedException("Header Authorization invalido")

    if not hmac.compare_digest(token.strip().encode("utf-8"), expected_token.encode("utf-8")):
        raise UnauthorizedException("Token invalido")
