"""
concierge/validate.py

Validation and normalization of candidate slot values.

Every extracted value passes through here before it reaches the session. A value that fails its
predicate is dropped and reported as a ValidationIssue; nothing in this module raises.

- validate_stay: dates (parseable, check-out after check-in, check-in not in the past) and guest counts
- validate_room / validate_payment: must resolve to the fixed enumerations
- validate_guest_details: name, phone and email, each independently
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from concierge.config import Settings
from concierge.dates import format_date, has_explicit_year, parse_stay_date
from concierge.extract import ROOM_BY_NAME, resolve_payment_method, resolve_room_type
from concierge.intents import GuestDetails, StayDetails

logger = logging.getLogger(__name__)

EMAIL_RX = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
NAME_CHARS_RX = re.compile(r"^[^\W\d_]+(?:[ .'\-]+[^\W\d_]+)*\.?$")

# English message per issue code; prompts.py holds the other languages.
ISSUE_MESSAGES = {
    "invalid_date": "That date doesn't look right: '{value}'. Try something like 'July 15'.",
    "past_date": "{value} is already in the past. Please give a future date.",
    "checkout_not_after_checkin": "Check-out ({value}) has to be after check-in.",
    "checkin_not_before_checkout": "Check-in ({value}) has to be before your check-out date.",
    "adults_range": "The number of adults must be between {low} and {high} (got {value}).",
    "children_range": "The number of children must be between 0 and {high} (got {value}).",
    "invalid_name": "I couldn't use '{value}' as a name. Please tell me your full name.",
    "invalid_phone": "That phone number doesn't look right: '{value}'. Please give at least 10 digits.",
    "invalid_email": "That email doesn't look right: '{value}'. It should look like name@example.com.",
    "unknown_room": "'{value}' isn't one of our rooms.",
    "unknown_payment": "'{value}' isn't a payment method we accept.",
}


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    code: str
    value: Any = None
    params: tuple[tuple[str, Any], ...] = ()

    def format_args(self) -> dict[str, Any]:
        value = format_date(self.value) if isinstance(self.value, date) else self.value
        return {"value": value, **dict(self.params)}

    def __str__(self) -> str:
        return ISSUE_MESSAGES[self.code].format(**self.format_args())


Checked = tuple[dict[str, Any], list[ValidationIssue]]


def normalize_phone(raw: str | None) -> str | None:
    """Digits only, 10 to 15 of them; None when the value is not a phone number."""
    if not raw:
        return None
    digits = re.sub(r"[\s().+\-]", "", str(raw))
    if not digits.isdigit() or not 10 <= len(digits) <= 15:
        return None
    return digits


def normalize_email(raw: str | None) -> str | None:
    if not raw:
        return None
    email = str(raw).strip().rstrip(".")
    if not EMAIL_RX.match(email):
        return None
    return email.lower()


def normalize_name(raw: str | None) -> str | None:
    """Collapse whitespace and title-case an all-lower-case name; None if it is not a name."""
    if not raw:
        return None
    name = re.sub(r"\s+", " ", str(raw)).strip()
    if len(name) < 2 or len(name) > 60 or not NAME_CHARS_RX.match(name):
        return None
    if name.islower():
        name = name.title()
    return name


def _check_in(phrase: str, settings: Settings, today: date):
    try:
        parsed = parse_stay_date(phrase, today)
    except (ValueError, OverflowError):
        return None, ValidationIssue("check_in", "invalid_date", phrase)
    floor = today - timedelta(days=max(settings.checkin_past_grace_days, 0))
    if has_explicit_year(phrase) and parsed < floor:
        return None, ValidationIssue("check_in", "past_date", parsed)
    return parsed, None


def _check_out(phrase: str, anchor: date | None, today: date):
    try:
        parsed = parse_stay_date(phrase, today, after=anchor)
    except (ValueError, OverflowError):
        return None, ValidationIssue("check_out", "invalid_date", phrase)
    if parsed < today:
        return None, ValidationIssue("check_out", "past_date", parsed)
    if anchor is not None and parsed <= anchor:
        return None, ValidationIssue("check_out", "checkout_not_after_checkin", parsed)
    return parsed, None


def validate_dates(details: StayDetails, stored_in: date | None, stored_out: date | None,
                   settings: Settings, today: date) -> Checked:
    """Validate the date part of a stay request against what the session already holds.

    A date phrase with no check-in/check-out context fills check-in when none is stored yet,
    otherwise check-out.
    """
    updates: dict[str, Any] = {}
    issues: list[ValidationIssue] = []
    in_phrase, out_phrase = details.check_in, details.check_out
    if details.undated:
        if in_phrase is None and stored_in is None:
            in_phrase = details.undated
        elif out_phrase is None:
            out_phrase = details.undated

    new_in = None
    if in_phrase:
        new_in, issue = _check_in(in_phrase, settings, today)
        if issue:
            issues.append(issue)
    if out_phrase:
        anchor = new_in or stored_in
        new_out, issue = _check_out(out_phrase, anchor, today)
        if issue:
            issues.append(issue)
        else:
            updates["check_out"] = new_out

    if new_in is not None:
        effective_out = updates.get("check_out", stored_out)
        if effective_out is not None and new_in >= effective_out:
            issues.append(ValidationIssue("check_in", "checkin_not_before_checkout", new_in))
        else:
            updates["check_in"] = new_in
    return updates, issues


def validate_guest_counts(details: StayDetails, settings: Settings) -> Checked:
    """Adults must be within bounds when mentioned; None means not mentioned."""
    updates: dict[str, Any] = {}
    issues: list[ValidationIssue] = []
    if details.adults is not None:
        if settings.min_adults <= details.adults <= settings.max_adults:
            updates["adults"] = details.adults
        else:
            issues.append(ValidationIssue("adults", "adults_range", details.adults,
                                          (("low", settings.min_adults), ("high", settings.max_adults))))
    if details.children:
        if 0 <= details.children <= settings.max_children:
            updates["children"] = details.children
        else:
            issues.append(ValidationIssue("children", "children_range", details.children,
                                          (("high", settings.max_children),)))
    elif details.no_children:
        updates["children"] = 0
    return updates, issues


def validate_stay(details: StayDetails, slots, settings: Settings, today: date) -> Checked:
    updates, issues = validate_dates(details, slots.check_in, slots.check_out, settings, today)
    more_updates, more_issues = validate_guest_counts(details, settings)
    updates.update(more_updates)
    issues.extend(more_issues)
    if issues:
        logger.debug("stay validation issues: %s", [i.code for i in issues])
    return updates, issues


def validate_room(value: str | None) -> Checked:
    if not value:
        return {}, []
    name = resolve_room_type(value)
    if name is None:
        return {}, [ValidationIssue("room_type", "unknown_room", value)]
    return {"room_type": name, "room_price": ROOM_BY_NAME[name].price}, []


def validate_payment(value: str | None) -> Checked:
    if not value:
        return {}, []
    method = resolve_payment_method(value)
    if method is None:
        return {}, [ValidationIssue("payment_method", "unknown_payment", value)]
    return {"payment_method": method}, []


def validate_guest_details(details: GuestDetails) -> Checked:
    updates: dict[str, Any] = {}
    issues: list[ValidationIssue] = []
    if details.name:
        name = normalize_name(details.name)
        if name:
            updates["guest_name"] = name
        else:
            issues.append(ValidationIssue("guest_name", "invalid_name", details.name))
    if details.phone:
        phone = normalize_phone(details.phone)
        if phone:
            updates["phone"] = phone
        else:
            issues.append(ValidationIssue("phone", "invalid_phone", details.phone))
    if details.email:
        email = normalize_email(details.email)
        if email:
            updates["email"] = email
        else:
            issues.append(ValidationIssue("email", "invalid_email", details.email))
    return updates, issues
