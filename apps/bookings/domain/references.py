"""Human-readable booking references: ``PREFIX-YYYYMMDD-XXXXXX``."""

import re
from datetime import date
from uuid import UUID, uuid4

DEFAULT_PREFIX = 'GMoP'
SUFFIX_LENGTH = 6

REFERENCE_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9]*-\d{8}-[0-9A-F]{6}$')


def new_reference(created_at: date, seed: UUID | None = None, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Build a booking reference for a booking created at ``created_at``.

    The suffix is taken from ``seed``, normally the booking's own UUID, so
    the reference inherits the id's entropy. A fresh seed yields a fresh
    reference when a collision forces a retry.
    """
    seed = seed or uuid4()
    return f"{prefix}-{created_at:%Y%m%d}-{seed.hex[:SUFFIX_LENGTH].upper()}"


def is_valid_reference(reference: str) -> bool:
    return bool(REFERENCE_PATTERN.match(reference))
