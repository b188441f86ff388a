"""
Domain events for the dinners service.

Events are published through the outbound event queue (src.messaging) and
consumed by handlers subscribed to their type, e.g. to persist a new dinner.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.dinners.dtos import DinnerDTO


@dataclass(kw_only=True)
class DomainEvent:
    """Base domain event."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    event_type: str = ""


@dataclass(kw_only=True)
class DinnerCreatedEvent(DomainEvent):
    """Event fired when a host submits a valid new dinner."""

    dinner: DinnerDTO

    def __post_init__(self):
        self.event_type = "dinner.created"

    @property
    def created_at(self) -> datetime:
        return self.timestamp
