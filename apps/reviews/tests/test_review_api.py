"""Integration tests for review endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.reviews.models import Review
from apps.vehicles.models import Vehicle

User = get_user_model()

RATINGS = {
    "cleanliness_rating": 5,
    "maintenance_rating": 4,
    "communication_rating": 3,
    "convenience_rating": 5,
    "accuracy_rating": 4,
}


class ReviewAPITests(APITestCase):
    """Covers review eligibility, duplicates and public listings."""

    def setUp(self) -> None:
        self.renter = User.objects.create_user(username="renter", email="renter@example.com", password="x")
        self.owner = User.objects.create_user(username="owner", email="owner@example.com", password="x")
        self.vehicle = Vehicle.objects.create(
            owner=self.owner,
            make="Nissan",
            model_name="Patrol",
            year=2018,
            daily_rate=Decimal("90000"),
            listing_status=Vehicle.ListingStatus.ACTIVE,
        )
        self.completed = self._booking("GMoP-20240501-AAAAAA", Booking.Status.COMPLETED, days_ago=20)
        self.confirmed = self._booking("GMoP-20240501-BBBBBB", Booking.Status.CONFIRMED, days_ago=5)
        self.client.force_authenticate(self.renter)
        self.list_url = reverse("review-list")

    def _booking(self, reference: str, booking_status: str, days_ago: int) -> Booking:
        start = date.today() - timedelta(days=days_ago)
        now = timezone.now()
        return Booking.objects.create(
            booking_reference=reference,
            vehicle=self.vehicle,
            renter=self.renter,
            start_date=start,
            end_date=start + timedelta(days=2),
            daily_rate=Decimal("90000"),
            total_days=2,
            subtotal=Decimal("180000"),
            platform_fee_rate=Decimal("0.12"),
            platform_fee=Decimal("21600"),
            security_deposit=Decimal("54000"),
            total_amount=Decimal("201600"),
            host_payout_amount=Decimal("158400"),
            currency_code="GNF",
            status=booking_status,
            created_at=now,
            updated_at=now,
        )

    def _payload(self, booking: Booking, **overrides) -> dict:
        payload = {"booking": str(booking.id), "comment": "Clean and reliable", **RATINGS}
        payload.update(overrides)
        return payload

    def test_renter_reviews_completed_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(self.completed), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["overall_rating"], "4.2")
        review = Review.objects.get()
        self.assertEqual(review.vehicle, self.vehicle)
        self.assertEqual(review.owner, self.owner)
        self.assertEqual(review.overall_rating, Decimal("4.2"))

    def test_unfinished_booking_cannot_be_reviewed(self) -> None:
        response = self.client.post(self.list_url, self._payload(self.confirmed), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "review_not_allowed")
        self.assertFalse(Review.objects.exists())

    def test_second_review_is_a_duplicate(self) -> None:
        self.client.post(self.list_url, self._payload(self.completed), format="json")

        response = self.client.post(self.list_url, self._payload(self.completed), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "duplicate_review")
        self.assertEqual(Review.objects.count(), 1)

    def test_owner_cannot_review_own_vehicle(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.post(self.list_url, self._payload(self.completed), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "review_not_allowed")

    def test_outsider_is_forbidden(self) -> None:
        self.client.force_authenticate(User.objects.create_user(username="other", password="x"))

        response = self.client.post(self.list_url, self._payload(self.completed), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_out_of_range_rating_is_a_field_error(self) -> None:
        response = self.client.post(
            self.list_url, self._payload(self.completed, accuracy_rating=6), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("accuracy_rating", response.data)

    def test_pending_lists_unreviewed_completed_bookings(self) -> None:
        url = reverse("review-pending")

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["booking_id"] for row in response.data], [str(self.completed.id)])

        self.client.post(self.list_url, self._payload(self.completed), format="json")
        self.assertEqual(self.client.get(url).data, [])

    def test_vehicle_reviews_are_public_and_published_only(self) -> None:
        self.client.post(self.list_url, self._payload(self.completed), format="json")
        url = reverse("review-for-vehicle", kwargs={"vehicle_id": str(self.vehicle.id)})

        self.client.force_authenticate(None)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reviewer_name"], "renter")

        Review.objects.update(is_published=False)
        self.assertEqual(self.client.get(url).data, [])
