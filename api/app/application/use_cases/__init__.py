"""
Casos de uso de la aplicacion.
"""
from .content_use_cases import ContentUseCases
from .sync_use_cases import FullSyncReport, KindSyncReport, SyncUseCases
from .webhook_use_cases import WebhookUseCases

__all__ = ["ContentUseCases", "SyncUseCases", "FullSyncReport", "KindSyncReport", "WebhookUseCases"]
