"""

집계 / 내보내기 테스트.

시나리오 (FUTURE_PERIOD, 350.00 템플릿, 입주자 A/B/C)
- A : 완납 (PAID)
- B : 100.00 부분 납부 (PENDING)
- C : 취소 (CANCELLED)
- A : 기간 없는 수동 청구 50.00, 기한 경과 (OVERDUE)

"""

import csv
import io
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from app.models.billing import ChargeStatus
from app.routers.reports import EXPORT_HEADER
from app.services.reports import count_by_status, sum_amount_by_status
from tests.helpers import (
    FUTURE_PERIOD,
    OPERATOR,
    create_ad_hoc,
    create_template,
    generate,
    pay,
    setup_residents,
)


@pytest.fixture()
def ledger(client):
    a, b, c = setup_residents(client, 3)
    template = create_template(client, amount="350.00")
    body = generate(client, template["id"], FUTURE_PERIOD).json()
    by_resident = {x["resident_id"]: x["charge_id"] for x in body["created"]}

    pay(client, by_resident[a["id"]], "350.00")
    pay(client, by_resident[b["id"]], "100.00")
    client.post(f"/charges/{by_resident[c['id']]}/cancel", headers=OPERATOR, json={"reason": "moved out"})
    create_ad_hoc(client, a["id"], amount="50.00", due_date="2026-02-10")

    return {"a": a, "b": b, "c": c, "template": template, "charges": by_resident}


def test_stats_over_whole_ledger(client, ledger):
    r = client.get("/reports/stats")
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["count_by_status"] == {"PENDING": 1, "PAID": 1, "OVERDUE": 1, "CANCELLED": 1}
    assert body["sum_by_status"] == {
        "PENDING": "350.00",
        "PAID": "350.00",
        "OVERDUE": "50.00",
        "CANCELLED": "350.00",
    }


def test_stats_by_period_reports_zero_for_missing_statuses(client, ledger):
    r = client.get("/reports/stats", params={"competency_period": FUTURE_PERIOD})
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["count_by_status"]["OVERDUE"] == 0
    assert body["sum_by_status"]["OVERDUE"] == "0.00"
    assert sum(body["count_by_status"].values()) == 3


def test_stats_filtered_by_status(client, ledger):
    r = client.get("/reports/stats", params={"status": "PAID"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["count_by_status"] == {"PAID": 1}
    assert body["sum_by_status"] == {"PAID": "350.00"}


def test_stats_on_empty_ledger(client):
    body = client.get("/reports/stats").json()
    assert body["count_by_status"] == {"PENDING": 0, "PAID": 0, "OVERDUE": 0, "CANCELLED": 0}
    assert set(body["sum_by_status"].values()) == {"0.00"}


def test_stats_count_lazy_overdue_and_swept_overdue_the_same(client):
    (a,) = setup_residents(client, 1)
    create_ad_hoc(client, a["id"], due_date="2026-02-10")

    before = client.get("/reports/stats").json()["count_by_status"]
    client.post("/charges/overdue-sweep", headers=OPERATOR, json={"as_of": "2026-02-11"})
    after = client.get("/reports/stats").json()["count_by_status"]

    assert before == after
    assert after["OVERDUE"] == 1


def test_stats_invalid_period(client):
    r = client.get("/reports/stats", params={"competency_period": "02-2026"})
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "period must be in 'YYYY-MM' format"


def test_export_csv(client, ledger):
    r = client.get("/reports/export", params={"period": FUTURE_PERIOD})
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith("text/csv")
    assert f"charges_{FUTURE_PERIOD}.csv" in r.headers["content-disposition"]
    assert r.content.startswith(b"\xef\xbb\xbf")

    rows = list(csv.reader(io.StringIO(r.content.decode("utf-8-sig"))))
    assert rows[0] == EXPORT_HEADER
    body = rows[1:]
    assert [row[2] for row in body] == ["Morador A", "Morador B", "Morador C"]
    assert [row[7] for row in body] == ["PAID", "PENDING", "CANCELLED"]
    assert [row[9] for row in body] == ["350.00", "100.00", "0.00"]
    assert {row[0] for row in body} == {FUTURE_PERIOD}


def test_export_xlsx(client, ledger):
    r = client.get("/reports/export.xlsx", params={"period": FUTURE_PERIOD})
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    wb = load_workbook(io.BytesIO(r.content))
    ws = wb.active
    values = list(ws.iter_rows(values_only=True))

    assert list(values[0]) == EXPORT_HEADER
    assert len(values) == 4
    # 금액은 숫자 셀
    assert [Decimal(str(v[8])) for v in values[1:]] == [Decimal("350")] * 3
    assert Decimal(str(values[2][9])) == Decimal("100")


def test_export_invalid_period(client):
    r = client.get("/reports/export", params={"period": "2026-13"})
    assert r.status_code == 400, r.text
    r = client.get("/reports/export.xlsx", params={"period": "2026"})
    assert r.status_code == 400, r.text


def test_count_and_sum_helpers_match_stats_endpoint(client, db, ledger):
    counts = count_by_status(db, competency_period=FUTURE_PERIOD)
    sums = sum_amount_by_status(db, competency_period=FUTURE_PERIOD)

    assert counts == {
        ChargeStatus.PENDING: 1,
        ChargeStatus.PAID: 1,
        ChargeStatus.OVERDUE: 0,
        ChargeStatus.CANCELLED: 1,
    }
    assert sums[ChargeStatus.PAID] == Decimal("350.00")
    assert sums[ChargeStatus.PENDING] == Decimal("350.00")
    assert sums[ChargeStatus.OVERDUE] == Decimal("0.00")

    # 납부 기한 이후 시점으로 보면 PENDING 은 모두 OVERDUE
    later = count_by_status(db, competency_period=FUTURE_PERIOD, as_of=date(2099, 3, 1))
    assert later[ChargeStatus.PENDING] == 0
    assert later[ChargeStatus.OVERDUE] == 1
