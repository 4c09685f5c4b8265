"""
Base Domain Classes

Building blocks shared by the booking and payment apps:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened to an aggregate
- EventRecorder: Mixin letting an aggregate (a Django model here) collect
  events until a unit of work publishes them
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Base fields are keyword-only so subclasses can declare required
    positional fields of their own.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: Any = None


class EventRecorder:
    """
    Mixin for aggregate roots

    Events are kept on the instance (not persisted) and drained by
    DjangoUnitOfWork.collect_events().
    """

    def _event_buffer(self) -> List[DomainEvent]:
        buffer = self.__dict__.get('_recorded_events')
        if buffer is None:
            buffer = []
            self.__dict__['_recorded_events'] = buffer
        return buffer

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        self._event_buffer().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._event_buffer().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._event_buffer())
