import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("vehicles", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booking_reference", models.CharField(editable=False, max_length=32, unique=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("actual_return_date", models.DateTimeField(blank=True, null=True)),
                ("includes_chauffeur", models.BooleanField(default=False)),
                ("pickup_location_id", models.PositiveIntegerField(blank=True, null=True)),
                ("dropoff_location_id", models.PositiveIntegerField(blank=True, null=True)),
                ("pickup_address", models.CharField(blank=True, max_length=255)),
                ("dropoff_address", models.CharField(blank=True, max_length=255)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Daily rate snapshot taken when the booking was created.",
                        max_digits=12,
                    ),
                ),
                ("total_days", models.PositiveIntegerField()),
                ("chauffeur_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=14)),
                ("platform_fee_rate", models.DecimalField(decimal_places=4, max_digits=5)),
                ("platform_fee", models.DecimalField(decimal_places=2, max_digits=14)),
                ("security_deposit", models.DecimalField(decimal_places=2, max_digits=14)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("host_payout_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency_code", models.CharField(max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requested", "Requested"),
                            ("confirmed", "Confirmed"),
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="requested",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending_deposit", "Pending deposit"),
                            ("deposit_paid", "Deposit paid"),
                            ("fully_paid", "Fully paid"),
                        ],
                        default="pending_deposit",
                        max_length=20,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField()),
                (
                    "renter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rentals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="vehicles.vehicle",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "start_date", "end_date"], name="booking_vehicle_dates_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                    models.Index(fields=["renter", "-created_at"], name="booking_renter_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
    ]
