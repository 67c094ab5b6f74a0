"""
Domain base types

Entities are identified by id and mutate over their lifetime. Value
objects are frozen and compared field by field. An aggregate root
records the events raised while it changes; whoever persists it hands
those events on once the change is durable.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """Identity-bearing object; equality and hashing follow ``id`` only"""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self, when: datetime | None = None):
        self.updated_at = when or utcnow()

    def __eq__(self, other):
        return isinstance(other, type(self)) and other.id == self.id

    def __hash__(self):
        return hash((type(self).__name__, self.id))


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen dataclass base; subclasses declare their fields"""


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """Aggregate root holding the events raised since it was last persisted"""
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        del self._events[:]

    @property
    def events(self) -> List['DomainEvent']:
        """Snapshot of pending events; mutating it does not touch the aggregate"""
        return list(self._events)


@dataclass(kw_only=True)
class DomainEvent:
    """
    Something that already happened.

    ``to_dict`` must stay JSON-safe: payloads travel through Celery.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': None if self.aggregate_id is None else str(self.aggregate_id),
        }
