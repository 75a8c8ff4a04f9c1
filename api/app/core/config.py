"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Configuracion del espejo CMS:
    - CMS_API_TOKEN: token de la API del CMS (lectura de colecciones)
    - CMS_*_COLLECTION_ID: IDs de coleccion por tipo de contenido
    - CMS_WEBHOOK_SECRET: secreto compartido para firmar webhooks.
      Si esta vacio, los webhooks se aceptan sin verificar (responsabilidad del operador).
    - RECONCILE_MODE: 'additive' (nunca borra) o 'mirror' (borra lo ausente del listado)
    - DATABASE_URL se puede especificar completa o por componentes
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="CMS Map Mirror")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos - Componentes separados (recomendado para flexibilidad)
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="map_user")
    DATABASE_PASSWORD: str = Field(default="map_pass")
    DATABASE_NAME: str = Field(default="map_db")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    # CMS - API de lectura
    CMS_API_BASE_URL: str = Field(default="https://api.webflow.com/v2")
    CMS_API_TOKEN: str = Field(default="")
    CMS_TIMEOUT_S: float = Field(default=15.0)
    CMS_MAX_RETRIES: int = Field(default=3)
    CMS_PAGE_SIZE: int = Field(default=100)

    # CMS - Colecciones (vacio = coleccion no sincronizada)
    CMS_STORIES_COLLECTION_ID: str = Field(default="")
    CMS_STORY_TAGS_COLLECTION_ID: str = Field(default="")
    CMS_PLACES_COLLECTION_ID: str = Field(default="")
    CMS_PLACE_TAGS_COLLECTION_ID: str = Field(default="")
    CMS_INITIATIVES_COLLECTION_ID: str = Field(default="")
    CMS_INITIATIVE_TAGS_COLLECTION_ID: str = Field(default="")

    # Webhooks
    CMS_WEBHOOK_SECRET: str = Field(default="")
    WEBHOOK_TIMESTAMP_HEADER: str = Field(default="x-webflow-timestamp")
    WEBHOOK_SIGNATURE_HEADER: str = Field(default="x-webflow-signature")
    WEBHOOK_MAX_AGE_S: int = Field(default=300)

    # Sync completo
    SYNC_TRIGGER_TOKEN: str = Field(default="")
    RECONCILE_MODE: str = Field(default="additive")

    # Validacion de coordenadas (lat +-90, lng +-180)
    REJECT_OUT_OF_RANGE_COORDINATES: bool = Field(default=True)

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    @computed_field
    @property
    def effective_sync_token(self) -> str:
        """
        Token bearer para disparar el sync completo.
        Si SYNC_TRIGGER_TOKEN no esta definido se usa el token de la API del CMS.
        """
        return self.SYNC_TRIGGER_TOKEN or self.CMS_API_TOKEN

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuración
settings = Settings()
