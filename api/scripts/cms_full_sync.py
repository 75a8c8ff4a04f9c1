"""
CLI: CMS -> base espejo (reconciliación completa).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) además de los webhooks.
  - No se integra al request/response del API para evitar timeouts.

Variables de entorno requeridas:
  - CMS_API_TOKEN
  - CMS_*_COLLECTION_ID (las colecciones que se quieran sincronizar)
  - DATABASE_URL (o los componentes DATABASE_*)

Ejecución:
  python scripts/cms_full_sync.py
  python scripts/cms_full_sync.py --mode mirror
  python scripts/cms_full_sync.py --kinds stories,places
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `app/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Cargar variables desde api/.env o desde la raíz del repo, antes de leer settings.
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from app.application.use_cases.sync_use_cases import SyncUseCases
from app.core.config import settings
from app.infrastructure.database.session import AsyncSessionLocal, close_db, init_db
from app.infrastructure.external.cms.factory import build_cms_client, build_collection_registry
from app.shared.constants.content_constants import ReconcileMode, parse_content_kinds


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync completo CMS -> base espejo")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ReconcileMode],
        default=None,
        help="additive (nunca borra) o mirror (borra lo ausente). Default: RECONCILE_MODE.",
    )
    parser.add_argument(
        "--kinds",
        default="",
        help="Tipos separados por coma (story,place,initiative). Default: todos.",
    )
    return parser.parse_args(argv)


async def run(mode: ReconcileMode, kinds) -> bool:
    await init_db()
    registry = build_collection_registry(settings)
    try:
        async with build_cms_client(settings) as client, AsyncSessionLocal() as session:
            use_cases = SyncUseCases(
                session,
                client,
                registry,
                mode=mode,
                check_range=settings.REJECT_OUT_OF_RANGE_COORDINATES,
            )
            report = await use_cases.run_full_sync(kinds or None)
    finally:
        await close_db()

    for name, counts in report.per_kind_counts().items():
        logger.info(f"{name}: {counts}")
    for name, error in report.errors().items():
        logger.error(f"{name}: {error}")
    return report.success


def main(argv=None) -> int:
    args = _parse_args(argv)

    if not settings.CMS_API_TOKEN:
        raise SystemExit("Falta variable de entorno obligatoria: CMS_API_TOKEN")

    try:
        kinds = parse_content_kinds(args.kinds.split(","))
    except ValueError:
        raise SystemExit(f"--kinds invalido: {args.kinds}") from None

    mode = ReconcileMode(args.mode or settings.RECONCILE_MODE)
    logger.info(f"Iniciando sync completo CMS -> base espejo (modo={mode.value})...")
    ok = asyncio.run(run(mode, kinds))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
