from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import List

from ..database import settings
from ..models.donation import DonationDraft
from ..utils.clock import ensure_aware
from .errors import ValidationError

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

REQUIRED_TEXT_FIELDS = (
    ("donor", "Donor name is required"),
    ("food_type", "Food type is required"),
    ("quantity", "Quantity is required"),
    ("location", "Pickup address is required"),
    ("phone", "Contact phone is required"),
)


def normalize_phone_number(phone: str) -> str:
    """Strip spaces, dashes and parentheses: "+1 (555) 123-4567" -> "+15551234567"."""
    return PHONE_SEPARATORS.sub("", phone or "")


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(normalize_phone_number(phone)))


def expiry_errors(expiry_time: datetime, now: datetime, max_days: int | None = None) -> List[str]:
    max_days = settings.max_expiry_days if max_days is None else max_days
    expiry_time = ensure_aware(expiry_time)
    errors = []
    if expiry_time <= now:
        errors.append("Best before time must be in the future")
    if expiry_time > now + timedelta(days=max_days):
        errors.append(f"Best before time cannot be more than {max_days} days in the future")
    return errors


def preparation_errors(preparation_time: datetime, now: datetime, max_age_days: int | None = None) -> List[str]:
    max_age_days = settings.max_preparation_age_days if max_age_days is None else max_age_days
    preparation_time = ensure_aware(preparation_time)
    errors = []
    if preparation_time > now:
        errors.append("Preparation time cannot be in the future")
    if preparation_time < now - timedelta(days=max_age_days):
        errors.append(f"Preparation time cannot be more than {max_age_days} days ago")
    return errors


def collect_errors(draft: DonationDraft, now: datetime) -> List[str]:
    errors: List[str] = []
    for field, message in REQUIRED_TEXT_FIELDS:
        if not getattr(draft, field).strip():
            errors.append(message)
    if draft.expiry_time is None:
        errors.append("Best before time is required")
    else:
        errors.extend(expiry_errors(draft.expiry_time, now))
    if draft.preparation_time is not None:
        errors.extend(preparation_errors(draft.preparation_time, now))
    if draft.phone.strip() and not is_valid_phone(draft.phone):
        errors.append("Please enter a valid phone number")
    return errors


def validate_draft(draft: DonationDraft, now: datetime) -> None:
    errors = collect_errors(draft, now)
    if errors:
        raise ValidationError(errors)
