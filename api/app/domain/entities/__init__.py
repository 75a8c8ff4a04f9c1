"""
Entidades del dominio.
"""
from app.domain.entities.content import (
    Coordinates,
    EntityDraft,
    InitiativeDetails,
    MapItem,
    PlaceDetails,
    StoryDetails,
    Tag,
    TagDraft,
    UpsertResult,
)
from app.domain.entities.webhook import WebhookEvent, WebhookOutcome, parse_event_type

__all__ = [
    "Coordinates",
    "EntityDraft",
    "InitiativeDetails",
    "MapItem",
    "PlaceDetails",
    "StoryDetails",
    "Tag",
    "TagDraft",
    "UpsertResult",
    "WebhookEvent",
    "WebhookOutcome",
    "parse_event_type",
]
