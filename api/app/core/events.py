"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable
from fastapi import FastAPI
from loguru import logger

from app.core.config import settings
from app.infrastructure.database.session import init_db, close_db
from app.shared.constants.content_constants import ReconcileMode


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            _validate_config()

            # Inicializar base de datos (crea tablas si no existen)
            await init_db()
            logger.info("Base de datos inicializada")

            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            logger.success("Aplicacion iniciada correctamente")
            _print_available_urls()

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """
    Valida la configuracion del espejo.
    Lo que falta no impide arrancar; solo se advierte.
    """
    warnings = []

    if not settings.CMS_API_TOKEN:
        warnings.append("CMS_API_TOKEN no configurado - sin sync completo ni fallback de lectura al CMS")

    if not settings.CMS_WEBHOOK_SECRET:
        warnings.append("CMS_WEBHOOK_SECRET no configurado - los webhooks se aceptan sin verificar firma")

    if not settings.effective_sync_token:
        warnings.append("SYNC_TRIGGER_TOKEN no configurado - POST /sync rechazara todos los requests")

    collections = {
        "CMS_STORIES_COLLECTION_ID": settings.CMS_STORIES_COLLECTION_ID,
        "CMS_PLACES_COLLECTION_ID": settings.CMS_PLACES_COLLECTION_ID,
        "CMS_INITIATIVES_COLLECTION_ID": settings.CMS_INITIATIVES_COLLECTION_ID,
    }
    for name, value in collections.items():
        if not value:
            warnings.append(f"{name} vacio - ese tipo no se sincroniza")

    try:
        ReconcileMode(settings.RECONCILE_MODE)
    except ValueError:
        raise ValueError(
            f"RECONCILE_MODE invalido: '{settings.RECONCILE_MODE}' (usar 'additive' o 'mirror')"
        ) from None

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def _print_available_urls() -> None:
    """Imprime las URLs disponibles de la aplicacion."""
    if settings.HOST == "0.0.0.0":
        access_host = "localhost"
    else:
        access_host = settings.HOST

    base_url = f"http://{access_host}:{settings.PORT}"

    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info("<bold><green>URLS DISPONIBLES:</green></bold>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info(f"<cyan>  Swagger UI:  {base_url}/docs</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Webhook:     {base_url}/api/v1/webhooks/cms-sync</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Map items:   {base_url}/api/v1/map-items</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Health:      {base_url}/health</cyan>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Ciclo de vida de la aplicacion (startup -> requests -> shutdown)."""
    await startup_handler(app)()
    yield
    await shutdown_handler(app)()
