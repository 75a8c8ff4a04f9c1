"""
Punto de entrada de la API del espejo CMS.

Expone el webhook de sync incremental, el trigger del sync completo y los
endpoints de lectura del mapa.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings, get_cors_origins
from app.core.events import lifespan
from app.api.v1.router import api_router
from app.api.middlewares.error_handler import ErrorHandlerMiddleware
from app.shared.exceptions.base import AppException


def _register_exception_handlers(application: FastAPI) -> None:
    """Todas las respuestas de error comparten el formato {"error", "message", "details"}."""

    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_response_content())

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = AppException(
            message="Parametros invalidos",
            status_code=422,
            error_code="VALIDATION_ERROR",
            details={"errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()
            ]},
        )
        return JSONResponse(status_code=error.status_code, content=error.to_response_content())


def create_application() -> FastAPI:
    """
    Factory de la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Espejo relacional de colecciones del CMS (stories, places, initiatives y tags) para el mapa",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(ErrorHandlerMiddleware)

    application.include_router(api_router, prefix="/api")
    _register_exception_handlers(application)

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Estado del servicio y de la configuración del espejo."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "cms_configured": bool(settings.CMS_API_TOKEN),
            "webhook_signature_required": bool(settings.CMS_WEBHOOK_SECRET),
            "reconcile_mode": settings.RECONCILE_MODE,
        }

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
