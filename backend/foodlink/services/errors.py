from __future__ import annotations

from typing import List, Sequence


class DonationError(Exception):
    """Base class for rejected operations. Prior state is left untouched."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DonationError):
    """One or more field rules failed. All violations are collected."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid donation")


class InvalidTransition(DonationError):
    def __init__(self, current_status: str, target_status: str, message: str | None = None) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message or f"Cannot move donation from {current_status} to {target_status}")


class SafetyAlertPending(DonationError):
    """Warnings exist; the submitter must confirm before the record is created."""

    def __init__(self, alerts: Sequence[str], safety_score: int) -> None:
        self.alerts: List[str] = list(alerts)
        self.safety_score = safety_score
        super().__init__("Food safety alerts require confirmation before submission")


class NotFound(DonationError):
    pass


class VolunteerUnavailable(DonationError):
    pass
