"""
Endpoint para disparar la reconciliacion completa CMS -> base espejo.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends

from app.api.v1.dependencies.use_case_deps import get_sync_use_cases, require_sync_token
from app.application.dto.content_dto import SyncRequestDTO, SyncResultDTO
from app.application.use_cases.sync_use_cases import SyncUseCases


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post("", response_model=SyncResultDTO, dependencies=[Depends(require_sync_token)])
async def run_full_sync(
    request: Optional[SyncRequestDTO] = Body(None),
    use_cases: SyncUseCases = Depends(get_sync_use_cases),
):
    """
    Ejecuta el sync completo (tags primero, luego cada tipo).

    Requiere `Authorization: Bearer <SYNC_TRIGGER_TOKEN>`.
    El body es opcional: `{"mode": "mirror", "kinds": ["story"]}`.
    """
    if request is not None and request.mode is not None:
        use_cases.mode = request.mode
    kinds = request.kinds if request is not None else None

    report = await use_cases.run_full_sync(kinds)
    return SyncResultDTO(
        success=report.success,
        per_kind_counts=report.per_kind_counts(),
        details={"errors": report.errors()},
        mode=report.mode,
    )
