"""
Endpoint de webhooks del CMS (sync incremental).
"""
from fastapi import APIRouter, Depends, Request
from loguru import logger
from pydantic import ValidationError

from app.api.v1.dependencies.use_case_deps import get_webhook_use_cases, get_webhook_verifier
from app.application.dto.content_dto import WebhookAckDTO, WebhookEventDTO
from app.application.use_cases.webhook_use_cases import WebhookUseCases
from app.core.security import WebhookSignatureVerifier
from app.shared.constants.content_constants import WebhookOutcomeStatus


router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/cms-sync", response_model=WebhookAckDTO, response_model_exclude_none=True)
async def cms_sync_webhook(
    request: Request,
    verifier: WebhookSignatureVerifier = Depends(get_webhook_verifier),
    use_cases: WebhookUseCases = Depends(get_webhook_use_cases),
):
    """
    Recibe un evento de item del CMS.

    - 401 si la firma o el timestamp no validan (el CMS no reintenta)
    - 200 con el resultado en cualquier otro caso salvo fallo de la base
    - 500 si la base falla (el CMS reintenta la entrega)
    """
    raw_body = await request.body()
    verifier.verify(request.headers, raw_body)

    try:
        event_dto = WebhookEventDTO.model_validate_json(raw_body)
    except ValidationError as e:
        logger.warning(f"Webhook con payload no decodificable: {e.error_count()} errores")
        return WebhookAckDTO(status=WebhookOutcomeStatus.IGNORED.value, reason="invalid_payload")

    event = event_dto.to_event()
    if event is None:
        logger.info(f"Webhook con tipo de evento no soportado: {event_dto.event_type}")
        return WebhookAckDTO(
            status=WebhookOutcomeStatus.IGNORED.value,
            external_id=event_dto.payload.external_id,
            reason="unsupported_event",
        )

    outcome = await use_cases.handle_event(event)
    return WebhookAckDTO(
        status=outcome.status.value,
        target=outcome.target.value if outcome.target else None,
        external_id=outcome.external_id,
        reason=outcome.reason,
    )
