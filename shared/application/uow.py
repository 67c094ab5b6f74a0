"""
Unit of Work

One database transaction per command. Domain events gathered while the
transaction is open are handed to the message bus only after it commits,
so a rolled back booking never notifies anyone.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Context manager around ``transaction.atomic()``.

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = booking_repo.get_by_id(booking_id, lock=True)
            booking.transition_to(BookingStatus.CONFIRMED, ActorRole.OWNER)
            booking_repo.save(booking)
            uow.collect_events(booking)
        # BookingConfirmed is published once the transaction commits

    Nested inside an outer atomic block the publication waits for the
    outermost commit.
    """

    def __init__(self, bus=None):
        self._bus = bus
        self._atomic = None
        self._pending: List[DomainEvent] = []

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publication()
            elif self._pending:
                logger.warning(f"Transaction rolled back, dropping {len(self._pending)} events")
        finally:
            self._pending = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
        return False

    def collect_events(self, aggregate):
        """Take over the aggregate's pending events."""
        events = aggregate.events
        aggregate.clear_events()
        self._pending.extend(events)
        if events:
            logger.debug(f"Collected {len(events)} events from {type(aggregate).__name__} {aggregate.id}")

    def _schedule_publication(self):
        if not self._pending:
            return
        events = list(self._pending)
        transaction.on_commit(lambda: self._publish(events))

    def _publish(self, events: List[DomainEvent]):
        """Best effort: the rows are committed whatever happens here."""
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        try:
            bus.publish_events(events)
        except Exception as e:
            logger.error(f"Error publishing events: {e}", exc_info=True)
