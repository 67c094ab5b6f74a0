"""API views for managing reviews."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .models import Review
from .ratings import RATING_CATEGORIES
from .serializers import PendingReviewSerializer, ReviewCreateSerializer, ReviewSerializer

VEHICLE_PATH = r'vehicle/(?P<vehicle_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})'


class ReviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Published reviews are public; submitting one requires a completed booking."""

    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filterset_fields = ['vehicle', 'owner']

    def get_queryset(self):  # type: ignore
        qs = Review.objects.select_related('booking', 'reviewer')
        user = self.request.user
        if user.is_authenticated and user.is_staff:
            return qs
        return qs.filter(is_published=True)

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return ReviewCreateSerializer
        if self.action == 'pending':
            return PendingReviewSerializer
        return ReviewSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        review = services.submit_review(
            data['booking'],
            request.user,
            {category: data[category] for category in RATING_CATEGORIES},
            comment=data['comment'],
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @action(
        detail=False,
        methods=['get'],
        url_path=VEHICLE_PATH,
        permission_classes=[permissions.AllowAny],
    )
    def for_vehicle(self, request, vehicle_id=None):  # type: ignore
        reviews = services.published_reviews_for_vehicle(vehicle_id)
        return Response(ReviewSerializer(reviews, many=True).data)

    @action(detail=False, methods=['get'], permission_classes=[permissions.IsAuthenticated])
    def pending(self, request):  # type: ignore
        bookings = services.pending_reviewable_bookings(request.user.pk)
        return Response(PendingReviewSerializer(bookings, many=True).data)
