"""Vehicle listing models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import CURRENCY_MINOR_UNITS, Money


class Vehicle(models.Model):
    """A vehicle listed for rent by its owner."""

    class ListingStatus(models.TextChoices):
        DRAFT = "draft", _("Draft")
        PENDING_REVIEW = "pending_review", _("Pending review")
        ACTIVE = "active", _("Active")
        SUSPENDED = "suspended", _("Suspended")
        ARCHIVED = "archived", _("Archived")

    class Currency(models.TextChoices):
        GNF = "GNF", "GNF"
        XOF = "XOF", "XOF"
        USD = "USD", "USD"
        EUR = "EUR", "EUR"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="vehicles",
    )
    make = models.CharField(max_length=50)
    model_name = models.CharField(max_length=50)
    year = models.PositiveSmallIntegerField()
    license_plate = models.CharField(max_length=20, blank=True)
    description = models.TextField(blank=True)
    daily_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Base price per rental day."),
    )
    currency_code = models.CharField(max_length=3, choices=Currency.choices, default=Currency.GNF)
    chauffeur_available = models.BooleanField(default=False)
    chauffeur_daily_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    listing_status = models.CharField(
        max_length=20,
        choices=ListingStatus.choices,
        default=ListingStatus.DRAFT,
    )
    location_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("City the vehicle is picked up in."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["listing_status"], name="vehicle_listing_status_idx"),
            models.Index(fields=["owner"], name="vehicle_owner_idx"),
        ]

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.make} {self.model_name}"

    def clean(self) -> None:
        super().clean()
        errors = {}
        for field in ("daily_rate", "chauffeur_daily_fee"):
            amount = getattr(self, field)
            # Sign and currency are checked by the field validators
            if amount is None or Decimal(amount) < 0 or self.currency_code not in CURRENCY_MINOR_UNITS:
                continue
            if not Money(Decimal(amount), self.currency_code).fits_minor_unit():
                errors[field] = _("Amount is finer than the smallest unit of %(currency)s.") % {
                    "currency": self.currency_code
                }
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        # Booking prices are derived from these amounts without rounding
        self.clean()
        super().save(*args, **kwargs)
