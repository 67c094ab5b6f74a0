import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _rating(help_text):
    return models.PositiveSmallIntegerField(
        help_text=help_text,
        validators=[
            django.core.validators.MinValueValidator(1),
            django.core.validators.MaxValueValidator(5),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        ("vehicles", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("overall_rating", models.DecimalField(decimal_places=1, max_digits=2)),
                ("cleanliness_rating", _rating("Cleanliness of the vehicle")),
                ("maintenance_rating", _rating("Mechanical condition")),
                ("communication_rating", _rating("Communication with the owner")),
                ("convenience_rating", _rating("Pickup and drop-off convenience")),
                ("accuracy_rating", _rating("Accuracy of the listing")),
                ("comment", models.TextField(blank=True)),
                ("is_published", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews",
                        to="bookings.booking",
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews",
                        to="vehicles.vehicle",
                    ),
                ),
                (
                    "reviewer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews_written",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "-created_at"], name="review_vehicle_idx"),
                    models.Index(fields=["owner"], name="review_owner_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "reviewer"), name="review_unique_booking_reviewer"),
                ],
            },
        ),
    ]
