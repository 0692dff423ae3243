"""Fixed vocabularies shared by the ORM models and the API schemas."""
from __future__ import annotations

from enum import Enum


class ExpenseCategory(str, Enum):
    VENUE = "Venue"
    CATERING = "Catering"
    DECORATION = "Decoration"
    ATTIRE = "Attire"
    PHOTOGRAPHY = "Photography"
    MUSIC = "Music"
    TRANSPORTATION = "Transportation"
    OTHER = "Other"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"
    PARTIALLY_PAID = "Partially Paid"
