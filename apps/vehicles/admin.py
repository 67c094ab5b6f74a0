"""Admin registration for vehicles."""

from __future__ import annotations

from django.contrib import admin

from .models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = (
        "display_name",
        "owner",
        "listing_status",
        "daily_rate",
        "currency_code",
        "chauffeur_available",
        "created_at",
    )
    list_filter = ("listing_status", "currency_code", "chauffeur_available")
    search_fields = ("make", "model_name", "license_plate", "owner__email")
    readonly_fields = ("created_at", "updated_at")
