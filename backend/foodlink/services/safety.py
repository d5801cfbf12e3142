"""Food safety scoring and alerting.

Both passes read the same sampled ``now`` and walk ordered rule tables.
Within a table only the first matching rule applies; separate tables stack.

Score: starts at 100, deductions from the preparation-age table, the raw
storage rule and the expiry table, floored at 0.

Alerts: preparation-age table, expiry table, raw storage rule, in that
order. When none of them fires a single informational notice is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from loguru import logger

from ..models.donation import REFRIGERATED_STORAGE
from ..utils.clock import hours_between

MAX_SCORE = 100

CRITICAL_UNREFRIGERATED = (
    "CRITICAL: Food has been unrefrigerated for over 24 hours. This poses significant food safety "
    "risks and should be collected within 1 day of donation submission."
)
WARNING_HOT_HOLDING = (
    "WARNING: Hot food should not be kept at serving temperature for more than 4 hours. "
    "Collection should occur within 1 day."
)
CAUTION_PREPARED_ROOM_TEMP = (
    "CAUTION: Prepared food at room temperature for over 2 hours requires careful handling. "
    "Collection recommended within 1 day."
)
URGENT_EXPIRY = "URGENT: Food expires in less than 1 hour. Immediate collection required within 1 day."
PRIORITY_EXPIRY = "PRIORITY: Food expires within 24 hours. Collection should occur within 1 day of donation."
WARNING_RAW_STORAGE = (
    "WARNING: Raw food should be kept refrigerated or frozen to prevent bacterial growth. "
    "Collection within 1 day is essential."
)
COLLECTION_NOTICE = (
    "NOTICE: All food donations should be collected within 1 day of submission to ensure food "
    "safety and quality."
)

HIGH_RISK_BELOW = 60
MEDIUM_RISK_BELOW = 80


@dataclass(frozen=True)
class SafetyContext:
    storage_conditions: str
    food_category: str
    age_hours: Optional[float]
    hours_until_expiry: Optional[float]

    @property
    def unrefrigerated(self) -> bool:
        return self.storage_conditions not in REFRIGERATED_STORAGE


@dataclass(frozen=True)
class Rule:
    name: str
    applies: Callable[[SafetyContext], bool]
    deduction: int = 0
    alert: Optional[str] = None


# Preparation-age rules only run for unrefrigerated food with a known
# preparation time. Shared by score and alerts.
AGE_RULES: Sequence[Rule] = (
    Rule("unrefrigerated_over_24h", lambda c: c.age_hours > 24, 50, CRITICAL_UNREFRIGERATED),
    Rule(
        "hot_held_over_4h",
        lambda c: c.age_hours > 4 and c.storage_conditions == "hot",
        30,
        WARNING_HOT_HOLDING,
    ),
    Rule(
        "prepared_over_2h",
        lambda c: c.age_hours > 2 and c.food_category == "prepared",
        20,
        CAUTION_PREPARED_ROOM_TEMP,
    ),
)

RAW_STORAGE_RULE = Rule(
    "raw_unrefrigerated",
    lambda c: c.food_category == "raw" and c.unrefrigerated,
    40,
    WARNING_RAW_STORAGE,
)

EXPIRY_SCORE_RULES: Sequence[Rule] = (
    Rule("expires_within_1h", lambda c: c.hours_until_expiry < 1, 30),
    Rule("expires_within_2h", lambda c: c.hours_until_expiry < 2, 15),
)

EXPIRY_ALERT_RULES: Sequence[Rule] = (
    Rule("expires_within_1h", lambda c: c.hours_until_expiry < 1, alert=URGENT_EXPIRY),
    Rule("expires_within_24h", lambda c: c.hours_until_expiry <= 24, alert=PRIORITY_EXPIRY),
)


@dataclass(frozen=True)
class SafetyReport:
    score: int
    alerts: List[str]

    @property
    def requires_confirmation(self) -> bool:
        """Any alert, the collection notice included, pauses submission."""
        return bool(self.alerts)


def first_match(rules: Sequence[Rule], context: SafetyContext) -> Optional[Rule]:
    for rule in rules:
        if rule.applies(context):
            return rule
    return None


def build_context(
    *,
    storage_conditions: str,
    food_category: str,
    expiry_time: Optional[datetime],
    preparation_time: Optional[datetime],
    now: datetime,
) -> SafetyContext:
    return SafetyContext(
        storage_conditions=storage_conditions,
        food_category=food_category,
        age_hours=hours_between(preparation_time, now) if preparation_time is not None else None,
        hours_until_expiry=hours_between(now, expiry_time) if expiry_time is not None else None,
    )


def _age_rule(context: SafetyContext) -> Optional[Rule]:
    if context.age_hours is None or not context.unrefrigerated:
        return None
    return first_match(AGE_RULES, context)


def safety_score(context: SafetyContext) -> int:
    deductions = 0
    age_rule = _age_rule(context)
    if age_rule:
        deductions += age_rule.deduction
    if RAW_STORAGE_RULE.applies(context):
        deductions += RAW_STORAGE_RULE.deduction
    if context.hours_until_expiry is not None:
        expiry_rule = first_match(EXPIRY_SCORE_RULES, context)
        if expiry_rule:
            deductions += expiry_rule.deduction
    return max(0, MAX_SCORE - deductions)


def safety_alerts(context: SafetyContext) -> List[str]:
    alerts: List[str] = []
    age_rule = _age_rule(context)
    if age_rule:
        alerts.append(age_rule.alert)
    if context.hours_until_expiry is not None:
        expiry_rule = first_match(EXPIRY_ALERT_RULES, context)
        if expiry_rule:
            alerts.append(expiry_rule.alert)
    if RAW_STORAGE_RULE.applies(context):
        alerts.append(RAW_STORAGE_RULE.alert)
    if not alerts:
        alerts.append(COLLECTION_NOTICE)
    return alerts


def compute_safety(
    *,
    storage_conditions: str,
    food_category: str,
    expiry_time: Optional[datetime],
    now: datetime,
    preparation_time: Optional[datetime] = None,
) -> SafetyReport:
    context = build_context(
        storage_conditions=storage_conditions,
        food_category=food_category,
        expiry_time=expiry_time,
        preparation_time=preparation_time,
        now=now,
    )
    report = SafetyReport(score=safety_score(context), alerts=safety_alerts(context))
    logger.debug(
        "Safety assessed storage={} category={} age_h={} expiry_h={} -> score {} ({} alerts)",
        storage_conditions,
        food_category,
        context.age_hours,
        context.hours_until_expiry,
        report.score,
        len(report.alerts),
    )
    return report


def assess(record: Any, now: datetime) -> SafetyReport:
    """Score a draft or stored donation."""
    return compute_safety(
        storage_conditions=record.storage_conditions,
        food_category=record.food_category,
        expiry_time=record.expiry_time,
        preparation_time=record.preparation_time,
        now=now,
    )


def risk_level(score: int) -> str:
    if score < HIGH_RISK_BELOW:
        return "High Risk"
    if score < MEDIUM_RISK_BELOW:
        return "Medium Risk"
    return "Low Risk"
