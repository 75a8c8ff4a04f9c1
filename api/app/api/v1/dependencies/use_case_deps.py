"""
Dependencias para inyeccion de casos de uso.

Los casos de uso no leen settings: aqui se construyen sus colaboradores
(cliente del CMS, registro de colecciones, verificador de firmas).
"""
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.content_use_cases import ContentUseCases
from app.application.use_cases.sync_use_cases import SyncUseCases
from app.application.use_cases.webhook_use_cases import WebhookUseCases
from app.core.config import settings
from app.core.security import WebhookSignatureVerifier, verify_bearer_token
from app.infrastructure.database.session import get_db
from app.infrastructure.external.cms.cms_client import CmsClient
from app.infrastructure.external.cms.factory import build_cms_client, build_collection_registry
from app.infrastructure.external.cms.sync_config import CollectionRegistry
from app.shared.constants.content_constants import ReconcileMode
from app.shared.exceptions.base import AppException


def get_collection_registry() -> CollectionRegistry:
    return build_collection_registry(settings)


async def get_cms_client() -> AsyncGenerator[Optional[CmsClient], None]:
    """
    Cliente del CMS por request (None si no hay token configurado).
    """
    if not settings.CMS_API_TOKEN:
        yield None
        return
    async with build_cms_client(settings) as client:
        yield client


def get_webhook_verifier() -> WebhookSignatureVerifier:
    return WebhookSignatureVerifier(
        settings.CMS_WEBHOOK_SECRET,
        timestamp_header=settings.WEBHOOK_TIMESTAMP_HEADER,
        signature_header=settings.WEBHOOK_SIGNATURE_HEADER,
        max_age_s=settings.WEBHOOK_MAX_AGE_S,
    )


def get_sync_token() -> str:
    return settings.effective_sync_token


def get_webhook_use_cases(
    db: AsyncSession = Depends(get_db),
    registry: CollectionRegistry = Depends(get_collection_registry),
) -> WebhookUseCases:
    """
    Dependencia para obtener los casos de uso de webhooks.

    Returns:
        WebhookUseCases: Instancia ligada a la sesion del request
    """
    return WebhookUseCases(
        db,
        registry,
        check_range=settings.REJECT_OUT_OF_RANGE_COORDINATES,
    )


def get_content_use_cases(
    db: AsyncSession = Depends(get_db),
    client: Optional[CmsClient] = Depends(get_cms_client),
    registry: CollectionRegistry = Depends(get_collection_registry),
) -> ContentUseCases:
    """
    Dependencia para obtener los casos de uso de lectura.

    Returns:
        ContentUseCases: Instancia con fallback al CMS si hay cliente
    """
    return ContentUseCases(
        db,
        client,
        registry,
        check_range=settings.REJECT_OUT_OF_RANGE_COORDINATES,
    )


def get_sync_use_cases(
    db: AsyncSession = Depends(get_db),
    client: Optional[CmsClient] = Depends(get_cms_client),
    registry: CollectionRegistry = Depends(get_collection_registry),
) -> SyncUseCases:
    """
    Dependencia para obtener el orquestador del sync completo.

    Raises:
        AppException: CMS_API_TOKEN no configurado (503)
    """
    if client is None:
        raise AppException(
            message="CMS_API_TOKEN no configurado: no se puede sincronizar",
            status_code=503,
            error_code="CMS_NOT_CONFIGURED",
        )
    return SyncUseCases(
        db,
        client,
        registry,
        mode=ReconcileMode(settings.RECONCILE_MODE),
        check_range=settings.REJECT_OUT_OF_RANGE_COORDINATES,
    )


def require_sync_token(
    authorization: Optional[str] = Header(None),
    expected_token: str = Depends(get_sync_token),
) -> None:
    """
    Valida `Authorization: Bearer <token>` del trigger de sync.

    Raises:
        UnauthorizedException: token ausente o distinto (401)
    """
    verify_bearer_token(authorization, expected_token)
