import uuid

from tests.helpers import FUTURE_PERIOD, create_ad_hoc, create_resident, create_template, generate, pay


def test_register_and_list_residents(client):
    create_resident(client, name="Ana", unit="102", block="A")
    create_resident(client, name="Bruno", unit="101", block="A")
    create_resident(client, name="Carla", unit="201", block="B", status="INACTIVE")

    r = client.get("/residents")
    assert r.status_code == 200, r.text
    assert [x["name"] for x in r.json()] == ["Bruno", "Ana", "Carla"]

    r = client.get("/residents", params={"status": "INACTIVE"})
    assert [x["name"] for x in r.json()] == ["Carla"]


def test_move_out_keeps_charge_snapshot(client):
    resident = create_resident(client, name="Ana", unit="101", block="A")
    template = create_template(client)
    generate(client, template["id"], FUTURE_PERIOD)

    r = client.patch(f"/residents/{resident['id']}/status", json={"status": "INACTIVE"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "INACTIVE"

    charge = client.get("/charges", params={"resident_id": resident["id"]}).json()[0]
    assert charge["unit"] == "101"
    assert charge["status"] == "PENDING"


def test_update_status_of_missing_resident(client):
    r = client.patch(f"/residents/{uuid.uuid4()}/status", json={"status": "INACTIVE"})
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "resident not found"


def test_resident_balance(client):
    resident = create_resident(client, name="Ana", unit="101")

    overdue = create_ad_hoc(client, resident["id"], amount="80.00", due_date="2026-02-10")
    pending = create_ad_hoc(client, resident["id"], amount="350.00", due_date="2099-02-10")
    paid = create_ad_hoc(client, resident["id"], amount="20.00", due_date="2099-02-10")
    pay(client, overdue["id"], "30.00")
    pay(client, pending["id"], "100.00")
    pay(client, paid["id"], "20.00")

    r = client.get(f"/residents/{resident['id']}/balance")
    assert r.status_code == 200, r.text
    assert r.json() == {
        "resident_id": resident["id"],
        "open_charges": 2,
        "outstanding_total": "300.00",
        "overdue_total": "50.00",
    }


def test_resident_balance_without_charges(client):
    resident = create_resident(client, name="Ana", unit="101")

    body = client.get(f"/residents/{resident['id']}/balance").json()
    assert body["open_charges"] == 0
    assert body["outstanding_total"] == "0.00"
    assert body["overdue_total"] == "0.00"


def test_resident_balance_missing_resident(client):
    r = client.get(f"/residents/{uuid.uuid4()}/balance")
    assert r.status_code == 404, r.text
