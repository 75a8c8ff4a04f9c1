"""
Evento de webhook ya normalizado y su resultado.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from app.shared.constants.content_constants import (
    CMS_TRIGGER_PREFIX,
    CollectionKind,
    WebhookEventType,
    WebhookOutcomeStatus,
)


def parse_event_type(raw: Optional[str]) -> Optional[WebhookEventType]:
    """
    Normaliza el tipo de evento.

    Acepta los nombres cortos ("changed") y los del CMS
    ("collection_item_changed"); cualquier otro valor es None.
    """
    if not isinstance(raw, str):
        return None
    name = raw.strip().lower()
    if name.startswith(CMS_TRIGGER_PREFIX):
        name = name[len(CMS_TRIGGER_PREFIX):]
    try:
        return WebhookEventType(name)
    except ValueError:
        return None


@dataclass(frozen=True)
class WebhookEvent:
    event_type: WebhookEventType
    collection_id: Optional[str]
    external_id: Optional[str]
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WebhookOutcome:
    """Lo que se hizo con un webhook autenticado (siempre se responde 200)."""

    status: WebhookOutcomeStatus
    target: Optional[CollectionKind] = None
    external_id: Optional[str] = None
    reason: Optional[str] = None
