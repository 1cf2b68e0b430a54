from datetime import date

import pytest

from concierge.config import Settings
from concierge.intents import GuestDetails, StayDetails
from concierge.session import Slots
from concierge.validate import (
    ValidationIssue,
    normalize_email,
    normalize_name,
    normalize_phone,
    validate_dates,
    validate_guest_counts,
    validate_guest_details,
    validate_payment,
    validate_room,
    validate_stay,
)

TODAY = date(2027, 1, 10)
SETTINGS = Settings()


def codes(issues):
    return [i.code for i in issues]


class TestNormalizers:
    def test_phone(self):
        assert normalize_phone("+1 (555) 123-4567") == "15551234567"
        assert normalize_phone("5551234567") == "5551234567"
        assert normalize_phone("12345") is None
        assert normalize_phone("555-CALL-NOW") is None

    def test_email(self):
        assert normalize_email("John@Example.COM") == "john@example.com"
        assert normalize_email("notanemail") is None
        assert normalize_email("a@b") is None

    def test_name(self):
        assert normalize_name("john  smith") == "John Smith"
        assert normalize_name("Mary-Jane O'Neil") == "Mary-Jane O'Neil"
        assert normalize_name("J") is None
        assert normalize_name("R2D2") is None


class TestDates:
    def test_both_ends(self):
        updates, issues = validate_dates(StayDetails(check_in="July 15", check_out="July 18"),
                                         None, None, SETTINGS, TODAY)
        assert not issues
        assert updates == {"check_in": date(2027, 7, 15), "check_out": date(2027, 7, 18)}

    def test_undated_fills_check_in_first(self):
        updates, _ = validate_dates(StayDetails(undated="July 15"), None, None, SETTINGS, TODAY)
        assert updates == {"check_in": date(2027, 7, 15)}

    def test_undated_fills_check_out_when_check_in_known(self):
        updates, _ = validate_dates(StayDetails(undated="July 18"), date(2027, 7, 15), None, SETTINGS, TODAY)
        assert updates == {"check_out": date(2027, 7, 18)}

    def test_checkout_before_checkin_rejected(self):
        updates, issues = validate_dates(StayDetails(check_in="July 18", check_out="July 15"),
                                         None, None, SETTINGS, TODAY)
        assert codes(issues) == ["checkout_not_after_checkin"]
        assert updates == {"check_in": date(2027, 7, 18)}

    def test_same_day_checkout_rejected(self):
        _, issues = validate_dates(StayDetails(check_out="July 15"), date(2027, 7, 15), None, SETTINGS, TODAY)
        assert codes(issues) == ["checkout_not_after_checkin"]

    def test_new_checkin_after_stored_checkout_rejected(self):
        updates, issues = validate_dates(StayDetails(check_in="July 20"), date(2027, 7, 15),
                                         date(2027, 7, 18), SETTINGS, TODAY)
        assert codes(issues) == ["checkin_not_before_checkout"]
        assert updates == {}

    def test_past_checkin_with_explicit_year(self):
        _, issues = validate_dates(StayDetails(check_in="January 5, 2027"), None, None, SETTINGS, TODAY)
        assert codes(issues) == ["past_date"]

    def test_grace_days(self):
        settings = Settings(checkin_past_grace_days=7)
        updates, issues = validate_dates(StayDetails(check_in="January 5, 2027"), None, None, settings, TODAY)
        assert not issues
        assert updates["check_in"] == date(2027, 1, 5)

    def test_unparseable(self):
        _, issues = validate_dates(StayDetails(check_in="February 30"), None, None, SETTINGS, TODAY)
        assert codes(issues) == ["invalid_date"]


class TestGuestCounts:
    def test_in_range(self):
        updates, issues = validate_guest_counts(StayDetails(adults=2, children=1), SETTINGS)
        assert updates == {"adults": 2, "children": 1}
        assert not issues

    def test_too_many_adults(self):
        updates, issues = validate_guest_counts(StayDetails(adults=11), SETTINGS)
        assert "adults" not in updates
        assert codes(issues) == ["adults_range"]
        assert "between 1 and 10" in str(issues[0])

    def test_zero_adults_rejected(self):
        updates, issues = validate_guest_counts(StayDetails(adults=0), SETTINGS)
        assert updates == {}
        assert codes(issues) == ["adults_range"]

    def test_too_many_children(self):
        _, issues = validate_guest_counts(StayDetails(adults=2, children=9), SETTINGS)
        assert codes(issues) == ["children_range"]

    def test_no_children_recorded_as_zero(self):
        updates, _ = validate_guest_counts(StayDetails(no_children=True), SETTINGS)
        assert updates == {"children": 0}

    def test_unmentioned_counts_ignored(self):
        assert validate_guest_counts(StayDetails(), SETTINGS) == ({}, [])

    def test_stay_combines_dates_and_counts(self):
        updates, issues = validate_stay(StayDetails(check_in="July 15", adults=2), Slots(), SETTINGS, TODAY)
        assert updates == {"check_in": date(2027, 7, 15), "adults": 2}
        assert not issues


class TestEnumerations:
    def test_room_sets_price(self):
        assert validate_room("suite") == ({"room_type": "Family Suite", "room_price": 180}, [])

    def test_unknown_room(self):
        updates, issues = validate_room("penthouse")
        assert updates == {}
        assert codes(issues) == ["unknown_room"]

    def test_payment(self):
        assert validate_payment("cash") == ({"payment_method": "Pay at Hotel"}, [])
        assert codes(validate_payment("bitcoin")[1]) == ["unknown_payment"]

    def test_nothing_given(self):
        assert validate_room(None) == ({}, [])
        assert validate_payment("") == ({}, [])


class TestGuestDetails:
    def test_each_field_independent(self):
        updates, issues = validate_guest_details(GuestDetails(name="john smith", phone="555", email="J@X.io"))
        assert updates == {"guest_name": "John Smith", "email": "j@x.io"}
        assert codes(issues) == ["invalid_phone"]
        assert issues[0].field == "phone"


class TestIssueText:
    @pytest.mark.parametrize("issue, fragment", [
        (ValidationIssue("check_out", "past_date", date(2026, 1, 1)), "January 1, 2026"),
        (ValidationIssue("email", "invalid_email", "notanemail"), "notanemail"),
    ])
    def test_message(self, issue, fragment):
        assert fragment in str(issue)
