"""Admin registration for reviews."""

from __future__ import annotations

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("booking", "vehicle", "reviewer", "overall_rating", "is_published", "created_at")
    list_filter = ("is_published", "overall_rating")
    search_fields = ("booking__booking_reference", "reviewer__email", "comment")
    list_editable = ("is_published",)
    readonly_fields = ("overall_rating", "created_at", "updated_at")
