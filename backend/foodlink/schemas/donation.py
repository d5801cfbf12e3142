from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List

from ..database import settings
from ..models.donation import Donation
from ..services.safety import risk_level
from ..utils.clock import hours_between


def time_until_expiry(expiry_time: datetime, now: datetime) -> str:
    hours = hours_between(now, expiry_time)
    if hours < 0:
        return "Expired"
    if hours < 1:
        return f"{round(hours * 60)}m left"
    return f"{round(hours)}h left"


def is_expiring_soon(expiry_time: datetime, now: datetime) -> bool:
    return 0 < hours_between(now, expiry_time) <= settings.expiring_soon_hours


def donation_document(donation: Donation, now: datetime) -> Dict[str, Any]:
    return {
        **donation.model_dump(mode="json"),
        "risk_level": risk_level(donation.safety_score),
        "time_until_expiry": time_until_expiry(donation.expiry_time, now),
        "expiring_soon": is_expiring_soon(donation.expiry_time, now),
    }


def serialize_donations(donations: Iterable[Donation], now: datetime) -> List[Dict[str, Any]]:
    return [donation_document(donation, now) for donation in donations]
