"""Bookings app package.

This app encapsulates the booking engine: pricing, availability,
booking references, the booking/payment state machine and the
reservation orchestrator that ties them together. Bookings ensure
atomicity and enforce date overlap exclusion via a per-vehicle row
lock and, on PostgreSQL, an exclusion constraint.
"""
