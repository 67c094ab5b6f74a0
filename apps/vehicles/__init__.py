"""Vehicles app package.

Vehicle listings owned by hosts and rented out through the booking
engine. The booking engine reads listings through
``apps.vehicles.services.DjangoVehicleCatalog`` and never writes them.
"""
