from dealership.models import AuditLogEntry, Vehicle

from conftest import API

VIN = "2T1BURHE5JC012345"


def new_vehicle(**extra):
    body = {"vin": VIN.lower(), "make": "Toyota", "model": "Corolla", "year": 2018, "mileage": 61000, "type": "used"}
    body.update(extra)
    return body


def test_create_vehicle_normalizes_vin_and_defaults_to_available(client, database, headers):
    response = client.post(f"{API}/vehicles", json=new_vehicle(), headers=headers["inventory_manager"])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["vin"] == VIN
    assert data["status"] == "Available"
    with database.session() as session:
        entry = session.query(AuditLogEntry).one()
        assert (entry.action, entry.entity_type, entry.entity_id) == ("CREATE", "VEHICLE", data["id"])
        assert entry.new_values["vin"] == VIN


def test_vehicle_vin_rules(client, headers, vehicle):
    invalid = client.post(f"{API}/vehicles", json=new_vehicle(vin="SHORTVIN"), headers=headers["admin"])
    duplicate = client.post(f"{API}/vehicles", json=new_vehicle(vin=vehicle.vin), headers=headers["admin"])

    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Invalid VIN format"
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Vehicle with this VIN already exists"


def test_vehicle_cannot_be_created_or_edited_into_sold(client, headers, vehicle):
    created_sold = client.post(f"{API}/vehicles", json=new_vehicle(status="Sold"), headers=headers["admin"])
    edited_sold = client.put(f"{API}/vehicles/{vehicle.id}", json={"status": "Sold"}, headers=headers["admin"])
    reserved = client.put(f"{API}/vehicles/{vehicle.id}", json={"status": "Reserved", "color": "Gray"},
                          headers=headers["inventory_manager"])

    assert created_sold.status_code == 400
    assert edited_sold.status_code == 400
    assert reserved.status_code == 200
    assert reserved.json()["data"]["status"] == "Reserved"
    assert reserved.json()["data"]["color"] == "Gray"


def test_sold_vehicle_status_cannot_be_edited_back(client, headers, customer, vehicle):
    client.post(f"{API}/sales", json={
        "customer_id": customer.id, "vehicle_id": vehicle.id, "sale_price": 21000,
    }, headers=headers["sales"])

    response = client.put(f"{API}/vehicles/{vehicle.id}", json={"status": "Available"}, headers=headers["admin"])

    assert response.status_code == 400


def test_empty_update_is_rejected(client, headers, vehicle):
    response = client.put(f"{API}/vehicles/{vehicle.id}", json={}, headers=headers["admin"])

    assert response.status_code == 400
    assert response.json()["error"] == "No valid fields to update"


def test_delete_vehicle(client, database, headers, customer, vehicle):
    unsold = client.post(f"{API}/vehicles", json=new_vehicle(), headers=headers["admin"]).json()["data"]
    client.post(f"{API}/sales", json={
        "customer_id": customer.id, "vehicle_id": vehicle.id, "sale_price": 21000,
    }, headers=headers["sales"])

    removed = client.delete(f"{API}/vehicles/{unsold['id']}", headers=headers["inventory_manager"])
    refused = client.delete(f"{API}/vehicles/{vehicle.id}", headers=headers["inventory_manager"])
    missing = client.delete(f"{API}/vehicles/{unsold['id']}", headers=headers["inventory_manager"])

    assert removed.status_code == 200
    assert refused.status_code == 400
    assert refused.json()["error"] == "Cannot delete vehicle with associated sales"
    assert missing.status_code == 404
    with database.session() as session:
        assert session.get(Vehicle, unsold["id"]) is None
        entry = session.query(AuditLogEntry).filter_by(action="DELETE").one()
        assert entry.old_values["vin"] == VIN
        assert entry.new_values is None


def test_list_vehicles_filters(client, headers, vehicle):
    client.post(f"{API}/vehicles", json=new_vehicle(), headers=headers["admin"])

    by_make = client.get(f"{API}/vehicles?make=toy", headers=headers["sales"]).json()["data"]
    by_type = client.get(f"{API}/vehicles?type=used", headers=headers["sales"]).json()["data"]
    everything = client.get(f"{API}/vehicles", headers=headers["sales"]).json()["data"]

    assert [v["make"] for v in by_make] == ["Toyota"]
    assert [v["model"] for v in by_type] == ["Corolla"]
    assert len(everything) == 2


def test_trade_in_estimate(client, headers, vehicle):
    response = client.get(f"{API}/vehicles/{vehicle.id}/trade-in-estimate?base_value=20000", headers=headers["sales"])

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["base_value"] == 20000
    assert 10000 <= data["estimated_value"] < 20000


def test_parts_crud_and_low_stock(client, database, headers, part):
    created = client.post(f"{API}/parts", json={
        "part_number": "FLT-200", "description": "Oil filter", "category": "Filters",
        "quantity_on_hand": 3, "retail_price": 12.5,
    }, headers=headers["inventory_manager"])
    duplicate = client.post(f"{API}/parts", json={
        "part_number": "BRK-1001", "description": "Copy", "category": "Brakes",
    }, headers=headers["inventory_manager"])

    assert created.status_code == 201
    assert created.json()["data"]["reorder_level"] == 10
    assert created.json()["data"]["low_stock"] is True
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Part with this number already exists"

    low = client.get(f"{API}/parts?low_stock=true", headers=headers["technician"]).json()["data"]
    assert [p["part_number"] for p in low] == ["FLT-200"]

    search = client.get(f"{API}/parts?search=brake", headers=headers["technician"]).json()["data"]
    assert [p["part_number"] for p in search] == ["BRK-1001"]

    restocked = client.put(f"{API}/parts/{created.json()['data']['id']}", json={"quantity_on_hand": 40},
                           headers=headers["inventory_manager"])
    assert restocked.json()["data"]["low_stock"] is False


def test_part_number_cannot_collide_on_update(client, headers, part):
    other = client.post(f"{API}/parts", json={
        "part_number": "FLT-200", "description": "Oil filter", "category": "Filters",
    }, headers=headers["admin"]).json()["data"]

    response = client.put(f"{API}/parts/{other['id']}", json={"part_number": "BRK-1001"}, headers=headers["admin"])

    assert response.status_code == 409


def test_technicians_cannot_create_parts(client, headers):
    response = client.post(f"{API}/parts", json={}, headers=headers["technician"])

    assert response.status_code == 403
