"""
Cliente mínimo de la API de colecciones del CMS (sin SDKs externos).

Requisitos cubiertos:
- httpx asíncrono con timeout explícito por request
- paginación por limit/offset hasta el total reportado
- rate-limit/backoff (429, 5xx) y reintentos ante errores de transporte
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from .types import CmsItem


class CmsApiError(RuntimeError):
    """Error de integración con la API del CMS."""


class CmsClient:
    """
    Cliente HTTP del CMS. Expone el listado completo de una colección.

    Importante:
    - No hace cast de tipos de campos: eso se decide en el mapper.
    - El caller es dueño del ciclo de vida (`async with` o `aclose()`).
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.webflow.com/v2",
        timeout_s: float = 15.0,
        max_retries: int = 3,
        page_size: int = 100,
        min_backoff_s: float = 0.5,
        max_backoff_s: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token
        self._max_retries = max_retries
        self._page_size = page_size
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> "CmsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_items(self, collection_id: str) -> List[CmsItem]:
        """
        Trae todos los items de una colección.

        Pagina con offset creciente hasta que:
        - se alcanza el `pagination.total` reportado, o
        - una página viene vacía, o
        - la respuesta no trae bloque de paginación.
        """
        if not collection_id:
            raise CmsApiError("collection_id vacío")

        items: List[CmsItem] = []
        offset = 0

        while True:
            payload = await self._request_json(
                "GET",
                f"/collections/{collection_id}/items",
                params={"limit": self._page_size, "offset": offset},
            )
            page = payload.get("items") or []

            for raw in page:
                item_id = raw.get("id")
                if not item_id:
                    # Caso raro; preferimos fallar temprano y visible.
                    raise CmsApiError(f"El CMS devolvió un item sin 'id' en la colección {collection_id}")
                items.append(CmsItem(item_id=str(item_id), fields=raw.get("fieldData") or {}))

            pagination = payload.get("pagination")
            if not page or not pagination:
                break
            total = pagination.get("total")
            if total is None or len(items) >= int(total):
                break
            offset += len(page)

        logger.debug(f"Colección {collection_id}: {len(items)} items leídos del CMS")
        return items

    async def _request_json(
        self, method: str, url: str, *, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx y errores de red.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial.
        - 5xx / timeout / conexión: exponencial con jitter aleatorio (hasta +25%).
        - 4xx (no 429): error inmediato (config/auth mal).
        """
        last_error = ""
        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.request(method, url, params=params)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
                if attempt >= self._max_retries:
                    break
                await asyncio.sleep(self._backoff(attempt))
                continue

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    raise CmsApiError(f"Respuesta no JSON del CMS ({url})") from e

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                last_error = f"HTTP {resp.status_code}: {resp.text[:500]}"
                if attempt >= self._max_retries:
                    break
                await asyncio.sleep(self._retry_after(resp) or self._backoff(attempt))
                continue

            # Errores no recuperables
            raise CmsApiError(f"Request al CMS falló {resp.status_code}: {resp.text[:500]}")

        raise CmsApiError(f"CMS no disponible tras {self._max_retries} reintentos ({url}): {last_error}")

    def _backoff(self, attempt: int) -> float:
        base = min(self._max_backoff_s, self._min_backoff_s * (2 ** attempt))
        return base + random.uniform(0, 0.25 * base)

    def _retry_after(self, resp: httpx.Response) -> Optional[float]:
        retry_after = resp.headers.get("Retry-After")
        if not retry_after:
            return None
        try:
            return min(self._max_backoff_s, max(0.0, float(retry_after)))
        except ValueError:
            return None
