from dealership.models import AuditLogEntry, Sale, Vehicle

from conftest import API


def sale_body(customer, vehicle, **extra):
    body = {"customer_id": customer.id, "vehicle_id": vehicle.id, "sale_price": 22000}
    body.update(extra)
    return body


def test_create_sale_marks_vehicle_sold_and_audits_once(client, database, headers, users, customer, vehicle):
    response = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"])

    assert response.status_code == 201
    sale = response.json()["data"]
    assert sale["sale_status"] == "Pending"
    assert sale["salesperson_id"] == users["sales"].id

    with database.session() as session:
        assert session.get(Vehicle, vehicle.id).status == "Sold"
        entries = session.query(AuditLogEntry).all()
        assert [(e.action, e.entity_type, e.entity_id) for e in entries] == [("CREATE", "SALE", sale["id"])]


def test_second_sale_of_the_same_vehicle_is_rejected(client, database, headers, customer, vehicle):
    first = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"])
    second = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["admin"])

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["error"] == "Vehicle is not available for sale"
    with database.session() as session:
        assert session.query(Sale).count() == 1


def test_sale_of_unknown_customer_or_vehicle_is_not_found(client, headers, customer, vehicle):
    no_customer = client.post(f"{API}/sales", json={
        "customer_id": "missing", "vehicle_id": vehicle.id, "sale_price": 1000,
    }, headers=headers["sales"])
    no_vehicle = client.post(f"{API}/sales", json={
        "customer_id": customer.id, "vehicle_id": "missing", "sale_price": 1000,
    }, headers=headers["sales"])

    assert no_customer.status_code == 404
    assert no_customer.json()["error"] == "Customer not found"
    assert no_vehicle.status_code == 404


def test_financed_sale_stores_payment_terms(client, headers, customer, vehicle):
    response = client.post(f"{API}/sales", json=sale_body(
        customer, vehicle, sale_price=20000, financing_type="loan", interest_rate=0, term_months=48, down_payment=1600,
    ), headers=headers["sales"])

    sale = response.json()["data"]
    # 20000 + 8% tax - 1600 down
    assert sale["amount_financed"] == 20000.0
    assert sale["monthly_payment"] == 416.67


def test_cancelling_a_sale_returns_the_vehicle(client, database, headers, customer, vehicle):
    sale_id = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"]).json()["data"]["id"]

    response = client.put(f"{API}/sales/{sale_id}", json={"sale_status": "Cancelled"}, headers=headers["sales"])

    assert response.status_code == 200
    with database.session() as session:
        assert session.get(Vehicle, vehicle.id).status == "Available"

    again = client.put(f"{API}/sales/{sale_id}", json={"warranty_package": "Gold"}, headers=headers["sales"])
    assert again.status_code == 400
    assert again.json()["error"] == "Cannot edit cancelled sales"

    resold = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"])
    assert resold.status_code == 201


def test_completed_sale_is_frozen(client, headers, customer, vehicle):
    sale_id = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"]).json()["data"]["id"]
    client.put(f"{API}/sales/{sale_id}", json={"sale_status": "Completed"}, headers=headers["sales"])

    response = client.put(f"{API}/sales/{sale_id}", json={"sale_status": "Cancelled"}, headers=headers["admin"])

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot edit completed sales"


def test_sale_update_is_audited_with_old_and_new_values(client, database, headers, customer, vehicle):
    sale_id = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"]).json()["data"]["id"]

    client.put(f"{API}/sales/{sale_id}", json={"sale_status": "Approved"}, headers=headers["admin"])

    with database.session() as session:
        entry = session.query(AuditLogEntry).filter_by(action="UPDATE", entity_id=sale_id).one()
        assert entry.old_values["sale_status"] == "Pending"
        assert entry.new_values["sale_status"] == "Approved"


def test_invalid_sale_status_is_rejected(client, headers, customer, vehicle):
    sale_id = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"]).json()["data"]["id"]

    response = client.put(f"{API}/sales/{sale_id}", json={"sale_status": "Sold"}, headers=headers["sales"])

    assert response.status_code == 400


def test_list_and_detail_include_related_names(client, headers, customer, vehicle):
    sale_id = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"]).json()["data"]["id"]

    listing = client.get(f"{API}/sales", headers=headers["accountant"]).json()["data"]
    detail = client.get(f"{API}/sales/{sale_id}", headers=headers["accountant"]).json()["data"]

    assert listing[0]["customer_name"] == "Dana Whitfield"
    assert listing[0]["make"] == "Honda"
    assert detail["vehicle"]["vin"] == "1HGCM82633A004352"
    assert detail["salesperson_name"] == "Sales"


def test_quote_prices_a_deal_without_recording_it(client, database, headers):
    response = client.post(f"{API}/sales/quote", json={
        "sale_price": 30000, "trade_in_value": 5000, "down_payment": 2000, "fees": 500,
        "interest_rate": 0, "term_months": 51,
    }, headers=headers["sales"])

    quote = response.json()["data"]
    assert response.status_code == 200
    assert quote["total"] == 27500.0
    assert quote["amount_financed"] == 25500.0
    assert quote["monthly_payment"] == 500.0
    with database.session() as session:
        assert session.query(Sale).count() == 0


def test_failed_sale_insert_leaves_the_vehicle_available(client, database, headers, customer, vehicle, monkeypatch):
    # A NULL sale date trips the NOT NULL constraint after the vehicle was flipped in the session
    monkeypatch.setattr("dealership.services.sales.utcnow", lambda: None)

    response = client.post(f"{API}/sales", json=sale_body(customer, vehicle), headers=headers["sales"])

    assert response.status_code == 400
    assert response.json()["error"] == "Request violates a data constraint"
    with database.session() as session:
        assert session.query(Sale).count() == 0
        assert session.get(Vehicle, vehicle.id).status == "Available"
        assert session.query(AuditLogEntry).count() == 0
