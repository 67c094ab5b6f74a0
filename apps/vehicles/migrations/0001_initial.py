import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("make", models.CharField(max_length=50)),
                ("model_name", models.CharField(max_length=50)),
                ("year", models.PositiveSmallIntegerField()),
                ("license_plate", models.CharField(blank=True, max_length=20)),
                ("description", models.TextField(blank=True)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Base price per rental day.",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "currency_code",
                    models.CharField(
                        choices=[("GNF", "GNF"), ("XOF", "XOF"), ("USD", "USD"), ("EUR", "EUR")],
                        default="GNF",
                        max_length=3,
                    ),
                ),
                ("chauffeur_available", models.BooleanField(default=False)),
                (
                    "chauffeur_daily_fee",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "listing_status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("pending_review", "Pending review"),
                            ("active", "Active"),
                            ("suspended", "Suspended"),
                            ("archived", "Archived"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                (
                    "location_id",
                    models.PositiveIntegerField(
                        blank=True, help_text="City the vehicle is picked up in.", null=True
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vehicles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["listing_status"], name="vehicle_listing_status_idx"),
                    models.Index(fields=["owner"], name="vehicle_owner_idx"),
                ],
            },
        ),
    ]
