from datetime import datetime, timedelta

import pytest

from dealership.services.calculations import (
    calculate_commission,
    calculate_inventory_value,
    calculate_lead_score,
    calculate_monthly_payment,
    calculate_profit,
    calculate_repair_order_total,
    calculate_sale_total,
    calculate_trade_in_value,
    get_lead_priority,
    round_money,
)


def test_round_money_rounds_half_up():
    assert round_money(2.675) == 2.68
    assert round_money(2.674) == 2.67
    assert round_money(None) == 0.0


def test_monthly_payment_amortizes():
    assert calculate_monthly_payment(20000, 6, 60) == 386.66


def test_monthly_payment_zero_rate_divides_evenly():
    assert calculate_monthly_payment(12000, 0, 60) == 200.0


@pytest.mark.parametrize("principal, months", [(0, 60), (20000, 0), (None, 36), (20000, None)])
def test_monthly_payment_without_principal_or_term_is_zero(principal, months):
    assert calculate_monthly_payment(principal, 5, months) == 0.0


def test_sale_total_breakdown():
    totals = calculate_sale_total(sale_price=30000, trade_in_value=5000, down_payment=2000, tax_rate=0.08, fees=500)

    assert totals == {
        "subtotal": 25000.0,
        "tax": 2000.0,
        "fees": 500.0,
        "total": 27500.0,
        "down_payment": 2000.0,
        "amount_financed": 25500.0,
    }


def test_repair_order_total_splits_labor_and_parts():
    items = [
        {"type": "labor", "total_price": 100},
        {"type": "labor", "total_price": 50},
        {"type": "part", "total_price": 25.5},
    ]

    totals = calculate_repair_order_total(items)

    assert totals["labor_total"] == 150.0
    assert totals["parts_total"] == 25.5
    assert totals["subtotal"] == 175.5
    assert totals["tax"] == 14.04
    assert totals["total"] == 189.54


def test_repair_order_total_of_no_items_is_zero():
    assert calculate_repair_order_total([])["total"] == 0.0


def test_trade_in_depreciates_by_age_and_mileage():
    assert calculate_trade_in_value(20000, year=2020, mileage=50000, current_year=2024) == 15000.0


def test_trade_in_depreciation_is_capped_at_half():
    assert calculate_trade_in_value(20000, year=2000, mileage=300000, current_year=2024) == 10000.0


def test_profit_and_margin():
    assert calculate_profit(30000, 25000, 1000) == {"profit": 4000.0, "margin": 13.33}
    assert calculate_profit(0, 100)["margin"] == 0.0


def test_commission_and_inventory_value():
    assert calculate_commission(30000) == 900.0
    assert calculate_inventory_value([{"purchase_price": 1000.5}, {"purchase_price": None}, {"purchase_price": 99.5}]) == 1100.0


def test_lead_score_is_capped_at_100():
    now = datetime(2026, 10, 1, 12, 0)
    lead = {
        "estimated_value": 35000,
        "lead_source": "Referral",
        "contact_email": "a@b.com",
        "contact_phone": "5551234567",
        "follow_up_date": now + timedelta(days=2),
        "vehicle_interested": "Civic",
        "inquiry_date": now - timedelta(hours=2),
    }

    assert calculate_lead_score(lead, now=now) == 100


def test_lead_score_for_a_sparse_week_old_lead():
    now = datetime(2026, 10, 1, 12, 0)
    lead = {
        "estimated_value": 10000,
        "lead_source": "Walk-in",
        "contact_email": "a@b.com",
        "inquiry_date": now - timedelta(days=3),
    }

    assert calculate_lead_score(lead, now=now) == 40


@pytest.mark.parametrize("score, priority", [(100, "High"), (80, "High"), (79, "Medium"), (50, "Medium"), (49, "Low"), (0, "Low")])
def test_lead_priority_thresholds(score, priority):
    assert get_lead_priority(score) == priority
