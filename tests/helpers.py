# tests/helpers.py
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.models.billing import Charge


OPERATOR = {"X-Operator": "sindico@test.com"}

# 연체로 바뀌지 않도록 충분히 먼 미래의 청구 월
FUTURE_PERIOD = "2099-02"


def create_resident(client, *, name: str, unit: str, block: str | None = "A", status: str = "ACTIVE") -> dict:
    r = client.post("/residents", json={"name": name, "unit": unit, "block": block, "status": status})
    assert r.status_code == 201, r.text
    return r.json()


def setup_residents(client, count: int = 3) -> list[dict]:
    """A, B, C ... 순서의 ACTIVE 입주자 생성"""
    return [
        create_resident(client, name=f"Morador {chr(65 + i)}", unit=f"10{i + 1}")
        for i in range(count)
    ]


def create_template(
    client,
    *,
    name: str = "Taxa Ordinária",
    amount: str = "350.00",
    due_day: int = 10,
    category: str = "ORDINARY",
    active: bool = True,
) -> dict:
    r = client.post(
        "/fee-templates",
        headers=OPERATOR,
        json={
            "name": name,
            "category": category,
            "default_amount": amount,
            "due_day": due_day,
            "recurring": True,
            "active": active,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def generate(client, template_id: str, period: str, **extra):
    body = {"template_id": template_id, "competency_period": period, **extra}
    return client.post("/charges/batch", headers=OPERATOR, json=body)


def create_ad_hoc(client, resident_id: str, *, amount: str = "350.00", due_date: str = "2099-02-10", **extra) -> dict:
    r = client.post(
        "/charges",
        headers=OPERATOR,
        json={
            "resident_id": resident_id,
            "description": "Multa por barulho",
            "amount": amount,
            "due_date": due_date,
            **extra,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def pay(client, charge_id: str, amount: str, **extra):
    return client.post(f"/charges/{charge_id}/payments", headers=OPERATOR, json={"amount": amount, **extra})


def created_residents(body: dict) -> list[str]:
    return [c["resident_id"] for c in body["created"]]


def skipped_residents(body: dict) -> list[str]:
    return [s["resident_id"] for s in body["skipped"]]


def open_charges_for(db: Session, *, template_id: str, resident_id: str, period: str) -> list[Charge]:
    db.expire_all()
    return list(
        db.scalars(
            select(Charge)
            .where(Charge.source_template_id == uuid.UUID(template_id))
            .where(Charge.resident_id == uuid.UUID(resident_id))
            .where(Charge.competency_period == period)
        ).all()
    )

