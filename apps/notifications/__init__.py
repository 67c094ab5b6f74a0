"""Notifications app package.

Turns booking domain events into e-mails to the renter and the vehicle
owner. Delivery runs in Celery and is best-effort: a failed message is
logged and never reaches the request that produced the event.
"""
