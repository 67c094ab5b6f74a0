"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "vehicle",
        "renter",
        "status",
        "payment_status",
        "start_date",
        "end_date",
        "total_amount",
        "currency_code",
        "created_at",
    )
    list_filter = ("status", "payment_status", "currency_code", "includes_chauffeur")
    search_fields = ("booking_reference", "vehicle__make", "vehicle__model_name", "renter__email")
    date_hierarchy = "start_date"
    # Status changes go through the booking engine, not the admin form
    readonly_fields = [field.name for field in Booking._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
