"""

청구 상태 생명주기 테스트.
- 부분 납부 누적 -> 완납 시 PAID
- 종료 상태(PAID / CANCELLED) 변경 거절
- 연체 스윕 멱등성, 조회 시점 연체 판정

"""

import uuid

import pytest
from sqlalchemy import select

from app.models.billing import ChargeStatus
from app.models.billing_log import BillingAction, BillingAuditLog
from app.services.charge_lifecycle import can_transition
from tests.helpers import OPERATOR, create_ad_hoc, create_resident, create_template, generate, pay


@pytest.fixture()
def resident(client):
    return create_resident(client, name="Ana", unit="101")


def test_partial_payments_accumulate_until_paid(client, resident):
    charge = create_ad_hoc(client, resident["id"], amount="350.00")
    assert charge["status"] == "PENDING"

    r = pay(client, charge["id"], "200.00")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "PENDING"
    assert body["paid_amount"] == "200.00"
    assert body["paid_at"] is None

    r = pay(client, charge["id"], "150.00", external_ref="pix-123")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "PAID"
    assert body["paid_amount"] == "350.00"
    assert body["paid_at"] is not None
    assert body["external_payment_ref"] == "pix-123"

    # 완납 후 추가 납부는 종료 상태 충돌
    r = pay(client, charge["id"], "10.00")
    assert r.status_code == 409, r.text
    assert r.json()["detail"] == "charge is already PAID"


def test_payment_keeps_explicit_paid_at(client, resident):
    charge = create_ad_hoc(client, resident["id"], amount="100.00")

    r = pay(client, charge["id"], "100.00", paid_at="2099-01-15T12:00:00+00:00")
    assert r.status_code == 200, r.text
    assert r.json()["paid_at"].startswith("2099-01-15T12:00:00")


def test_overpayment_is_rejected(client, resident):
    charge = create_ad_hoc(client, resident["id"], amount="350.00")
    pay(client, charge["id"], "300.00")

    r = pay(client, charge["id"], "100.00")
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "payment exceeds outstanding amount (50.00)"

    r = client.get(f"/charges/{charge['id']}")
    assert r.json()["paid_amount"] == "300.00"
    assert r.json()["status"] == "PENDING"


@pytest.mark.parametrize("amount", ["0", "0.00", "-5.00"])
def test_non_positive_payment_is_rejected(client, resident, amount):
    charge = create_ad_hoc(client, resident["id"])

    r = pay(client, charge["id"], amount)
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "amount must be greater than zero"


def test_payment_on_missing_charge(client):
    r = pay(client, str(uuid.uuid4()), "10.00")
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "charge not found"


def test_cancel_pending_charge(client, resident):
    charge = create_ad_hoc(client, resident["id"], notes="gerado manualmente")

    r = client.post(f"/charges/{charge['id']}/cancel", headers=OPERATOR, json={"reason": "duplicated"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "CANCELLED"
    assert body["notes"] == "gerado manualmente\nCancelled: duplicated"

    # 취소된 청구에는 납부 / 재취소 불가
    r = pay(client, charge["id"], "10.00")
    assert r.status_code == 409, r.text
    assert r.json()["detail"] == "charge is already CANCELLED"

    r = client.post(f"/charges/{charge['id']}/cancel", headers=OPERATOR, json={"reason": "again"})
    assert r.status_code == 409, r.text


def test_cancel_paid_charge_is_rejected(client, resident):
    charge = create_ad_hoc(client, resident["id"], amount="50.00")
    pay(client, charge["id"], "50.00")

    r = client.post(f"/charges/{charge['id']}/cancel", headers=OPERATOR, json={"reason": "oops"})
    assert r.status_code == 409, r.text
    assert r.json()["detail"] == "charge is already PAID"


def test_past_due_pending_reads_as_overdue_before_sweep(client, resident):
    charge = create_ad_hoc(client, resident["id"], due_date="2026-02-10")
    assert charge["status"] == "OVERDUE"

    listed = client.get("/charges", params={"status": "OVERDUE"}).json()
    assert [c["id"] for c in listed] == [charge["id"]]

    assert client.get("/charges", params={"status": "PENDING"}).json() == []


def test_overdue_sweep_is_idempotent(client, db, resident):
    past = create_ad_hoc(client, resident["id"], due_date="2026-02-10")
    future = create_ad_hoc(client, resident["id"], due_date="2099-02-10")

    r = client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-11"})
    assert r.status_code == 200, r.text
    assert r.json() == {"as_of": "2026-02-11", "count": 1}

    r = client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-12"})
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 0

    assert client.get(f"/charges/{past['id']}").json()["status"] == "OVERDUE"
    assert client.get(f"/charges/{future['id']}").json()["status"] == "PENDING"

    logs = db.scalars(
        select(BillingAuditLog).where(BillingAuditLog.action == BillingAction.OVERDUE_SWEEP)
    ).all()
    assert len(logs) == 1
    assert logs[0].detail == {"as_of": "2026-02-11", "count": 1}


def test_overdue_sweep_on_due_date_does_not_flip(client, resident):
    create_ad_hoc(client, resident["id"], due_date="2026-02-10")

    r = client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-10"})
    assert r.json()["count"] == 0


def test_overdue_sweep_skips_paid_and_cancelled(client, resident):
    paid = create_ad_hoc(client, resident["id"], amount="10.00", due_date="2026-02-10")
    pay(client, paid["id"], "10.00")
    cancelled = create_ad_hoc(client, resident["id"], due_date="2026-02-10")
    client.post(f"/charges/{cancelled['id']}/cancel", headers=OPERATOR, json={"reason": "x"})

    r = client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-03-01"})
    assert r.json()["count"] == 0
    assert client.get(f"/charges/{paid['id']}").json()["status"] == "PAID"
    assert client.get(f"/charges/{cancelled['id']}").json()["status"] == "CANCELLED"


def test_overdue_charge_can_still_be_paid(client, resident):
    charge = create_ad_hoc(client, resident["id"], amount="100.00", due_date="2026-02-10")
    client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-11"})

    r = pay(client, charge["id"], "40.00")
    assert r.json()["status"] == "OVERDUE"

    r = pay(client, charge["id"], "60.00")
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "PAID"


def test_attach_checkout_ref(client, resident):
    charge = create_ad_hoc(client, resident["id"])

    r = client.put(f"/charges/{charge['id']}/checkout-ref", headers=OPERATOR, json={"checkout_ref": "cs_test_1"})
    assert r.status_code == 200, r.text
    assert r.json()["external_checkout_ref"] == "cs_test_1"

    pay(client, charge["id"], "350.00")
    r = client.put(f"/charges/{charge['id']}/checkout-ref", headers=OPERATOR, json={"checkout_ref": "cs_test_2"})
    assert r.status_code == 409, r.text


@pytest.mark.parametrize("current, target, allowed", [
    (ChargeStatus.PENDING, ChargeStatus.PAID, True),
    (ChargeStatus.PENDING, ChargeStatus.OVERDUE, True),
    (ChargeStatus.PENDING, ChargeStatus.CANCELLED, True),
    (ChargeStatus.OVERDUE, ChargeStatus.PAID, True),
    (ChargeStatus.OVERDUE, ChargeStatus.CANCELLED, True),
    (ChargeStatus.OVERDUE, ChargeStatus.PENDING, False),
    (ChargeStatus.PAID, ChargeStatus.CANCELLED, False),
    (ChargeStatus.CANCELLED, ChargeStatus.PENDING, False),
])
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_cancel_overdue_charge_then_regenerate(client, resident):
    template = create_template(client)
    first = generate(client, template["id"], "2026-02").json()
    charge_id = first["created"][0]["charge_id"]

    r = client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-11"})
    assert r.json()["count"] == 1

    r = client.post(f"/charges/{charge_id}/cancel", headers=OPERATOR, json={"reason": "acordo com o síndico"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "CANCELLED"

    again = generate(client, template["id"], "2026-02").json()
    assert [c["resident_id"] for c in again["created"]] == [resident["id"]]
    assert again["created"][0]["charge_id"] != charge_id
    assert again["skipped"] == []
