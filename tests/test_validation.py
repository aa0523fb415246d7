import pytest

from dealership.services.validation import (
    sanitize_fields,
    sanitize_input,
    validate_date,
    validate_email,
    validate_item_type,
    validate_lead_status,
    validate_phone,
    validate_positive_number,
    validate_repair_order_status,
    validate_required_fields,
    validate_role,
    validate_sale_status,
    validate_service_status,
    validate_vin,
    validate_zip_code,
)


@pytest.mark.parametrize("email, valid", [
    ("dana@example.com", True),
    ("dana.w+cars@mail.example.org", True),
    ("dana@example", False),
    ("dana example.com", False),
    ("", False),
    (None, False),
])
def test_validate_email(email, valid):
    assert validate_email(email) is valid


@pytest.mark.parametrize("phone, valid", [
    ("555-123-4567", True),
    ("+1 (555) 123-4567", True),
    ("12345", False),
    ("555-abc-1234", False),
    (None, False),
])
def test_validate_phone(phone, valid):
    assert validate_phone(phone) is valid


@pytest.mark.parametrize("vin, valid", [
    ("1HGCM82633A004352", True),
    ("1hgcm82633a004352", True),
    ("1HGCM82633A00435I", False),  # I is never used
    ("1HGCM82633A00435", False),
    ("1HGCM82633A0043521", False),
    (None, False),
])
def test_validate_vin(vin, valid):
    assert validate_vin(vin) is valid


@pytest.mark.parametrize("zip_code, valid", [("30301", True), ("30301-1234", True), ("3030", False), ("30301-12", False)])
def test_validate_zip_code(zip_code, valid):
    assert validate_zip_code(zip_code) is valid


def test_validate_date():
    assert validate_date("2026-10-19")
    assert validate_date("2026-10-19T08:30:00")
    assert not validate_date("19/10/2026")
    assert not validate_date(None)


def test_validate_positive_number():
    assert validate_positive_number(0)
    assert validate_positive_number("12.5")
    assert not validate_positive_number(-1)
    assert not validate_positive_number("abc")
    assert not validate_positive_number(None)


def test_required_fields_reports_missing_and_blank():
    assert validate_required_fields({"a": "x", "b": "  "}, ["a", "b", "c"]) == ["b", "c"]


def test_required_fields_returns_none_when_complete():
    assert validate_required_fields({"a": "x", "b": 0}, ["a", "b"]) is None


def test_sanitize_input_trims_and_drops_angle_brackets():
    assert sanitize_input("  <b>hi</b> ") == "bhi/b"
    assert sanitize_input(42) == 42


def test_sanitize_fields_applies_to_every_value():
    assert sanitize_fields({"name": " <Ann> ", "year": 2020}) == {"name": "Ann", "year": 2020}


def test_status_and_role_validators():
    assert validate_lead_status("Qualified")
    assert not validate_lead_status("Hot")
    assert validate_sale_status("Financed")
    assert not validate_sale_status("Sold")
    assert validate_service_status("In Progress")
    assert validate_repair_order_status("Completed")
    assert not validate_repair_order_status("Closed")
    assert validate_item_type("part")
    assert not validate_item_type("fee")
    assert validate_role("inventory_manager")
    assert not validate_role("driver")
