"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .content_dto import (
    TagDTO,
    StoryDTO,
    PlaceDTO,
    InitiativeDTO,
    MapItemDTO,
    to_item_dto,
    WebhookEventDTO,
    WebhookAckDTO,
    SyncRequestDTO,
    SyncResultDTO,
)

__all__ = [
    "TagDTO",
    "StoryDTO",
    "PlaceDTO",
    "InitiativeDTO",
    "MapItemDTO",
    "to_item_dto",
    "WebhookEventDTO",
    "WebhookAckDTO",
    "SyncRequestDTO",
    "SyncResultDTO",
]
