from datetime import datetime, timedelta

from dealership.services.insights import (
    analyze_sales_trends,
    generate_engagement_recommendations,
    predict_inventory_needs,
)

from conftest import API

NOW = datetime(2026, 10, 19, 12, 0)


def test_recommendations_for_a_lapsed_customer():
    recommendations = generate_engagement_recommendations(
        {"preferred_contact": "sms"},
        purchases=[{"sale_date": datetime(2022, 1, 10)}],
        services=[{"service_date": datetime(2026, 1, 5)}],
        communications=[{"sent_date": datetime(2026, 8, 1)}],
        now=NOW,
    )

    assert [r["type"] for r in recommendations] == [
        "vehicle_upgrade", "service_reminder", "engagement", "communication",
    ]
    assert recommendations[0]["priority"] == "High"
    assert recommendations[-1]["action"] == "Use sms for outreach"


def test_recent_activity_only_reports_the_contact_preference():
    recommendations = generate_engagement_recommendations(
        {"preferred_contact": "email"},
        purchases=[{"sale_date": NOW - timedelta(days=100)}],
        services=[{"service_date": NOW - timedelta(days=20)}],
        communications=[{"sent_date": NOW - timedelta(days=3)}],
        now=NOW,
    )

    assert recommendations == [{
        "type": "communication",
        "priority": "Info",
        "message": "Customer prefers email communication",
        "action": "Use email for outreach",
    }]


def test_sales_trends_cover_the_period_only():
    sales = [
        {"sale_date": NOW - timedelta(days=2), "sale_price": 20000, "vehicle_type": "used"},
        {"sale_date": NOW - timedelta(days=10), "sale_price": 30000, "vehicle_type": "new"},
        {"sale_date": NOW - timedelta(days=40), "sale_price": 50000, "vehicle_type": "used"},
    ]

    trends = analyze_sales_trends(sales, period=30, now=NOW)

    assert trends["total_sales"] == 2
    assert trends["total_revenue"] == 50000.0
    assert trends["avg_sale_price"] == 25000.0
    assert trends["popular_vehicle_types"] == {"used": 1, "new": 1}
    assert trends["trend"] == "positive"
    assert analyze_sales_trends([], now=NOW)["trend"] == "neutral"


def test_inventory_needs_follow_days_of_cover():
    available = [{"status": "Available"}] * 10

    healthy = predict_inventory_needs(available + [{"status": "Sold"}], sales_last_30_days=6)
    slow = predict_inventory_needs(available, sales_last_30_days=0)
    short = predict_inventory_needs(available, sales_last_30_days=30)

    assert healthy["inventory"] == {"available": 10, "sold": 1, "total": 11}
    assert healthy["days_of_inventory"] == 50
    assert healthy["recommendation"] == "Inventory levels are healthy"
    assert slow["recommendation"] == "High inventory - consider promotions"
    assert short["sales_rate"] == 1.0
    assert short["recommendation"] == "Low inventory - consider restocking"


# Endpoints

def create_lead(client, headers, **extra):
    body = {"lead_source": "Website", "contact_name": "Pat Quinn"}
    body.update(extra)
    return client.post(f"{API}/leads", json=body, headers=headers).json()["data"]


def test_batch_scoring_defaults_to_open_leads(client, headers):
    open_lead = create_lead(client, headers["sales"], contact_email="pat@example.com", estimated_value=42000)
    lost_lead = create_lead(client, headers["sales"], contact_name="Sam Ortiz", lead_status="Lost")

    default = client.post(f"{API}/ai/lead-scoring", headers=headers["sales"])
    chosen = client.post(f"{API}/ai/lead-scoring", json={"lead_ids": [lost_lead["id"]]}, headers=headers["sales"])

    assert default.status_code == 200
    assert [lead["id"] for lead in default.json()["data"]] == [open_lead["id"]]
    assert default.json()["data"][0]["score"] == open_lead["score"]
    assert [lead["id"] for lead in chosen.json()["data"]] == [lost_lead["id"]]
    assert chosen.json()["data"][0]["priority"] in {"High", "Medium", "Low"}


def test_batch_scoring_respects_lead_visibility(client, headers):
    create_lead(client, headers["admin"], contact_email="admin-lead@example.com")

    mine = client.post(f"{API}/ai/lead-scoring", json={}, headers=headers["sales"])
    forbidden = client.post(f"{API}/ai/lead-scoring", json={}, headers=headers["technician"])

    assert mine.json()["data"] == []
    assert forbidden.status_code == 403


def test_engagement_recommendations_endpoint(client, headers, customer):
    response = client.post(f"{API}/ai/engagement-recommendations",
                           json={"customer_id": customer.id}, headers=headers["sales"])
    missing = client.post(f"{API}/ai/engagement-recommendations", json={}, headers=headers["sales"])
    unknown = client.post(f"{API}/ai/engagement-recommendations",
                          json={"customer_id": "missing"}, headers=headers["sales"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["customer"]["id"] == customer.id
    assert [r["type"] for r in data["recommendations"]] == ["communication"]
    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing required fields: customer_id"
    assert unknown.status_code == 404
