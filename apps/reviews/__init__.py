"""Reviews app package.

Renters review a vehicle once their booking is completed. Eligibility is
derived from the booking status owned by ``apps.bookings``.
"""
