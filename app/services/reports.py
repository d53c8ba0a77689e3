"""
services/reports.py

청구 원장 집계(Aggregation) / 리포트 로직.

대시보드에 표시되는 상태별 건수 / 금액 합계와
관리자용 월별 청구 내역 내보내기 데이터를 계산한다.

설계 원칙:
- 읽기 전용, 원장에 어떤 변경도 하지 않음
- 상태는 조회 시점 기준 '유효 상태'로 집계
  (기한이 지난 PENDING 은 스윕 전이라도 OVERDUE 로 집계)
- 건수와 금액은 하나의 GROUP BY 쿼리로 계산하여
  같은 스냅샷에서 나온 값임을 보장
- 금액 합계 기준
  PENDING / OVERDUE / CANCELLED : amount 합
  PAID                          : paid_amount 합

관련 파일:
- app.services.charges   : 유효 상태 SQL 식
- app.routers.reports    : 집계 / 내보내기 API

"""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from app.models.billing import Charge, ChargeStatus
from app.models.resident import Resident
from app.services.billing_calendar import billing_today, validate_period
from app.services.charges import effective_status_expr
from app.services.money import to_money


def _empty_counts() -> dict[ChargeStatus, int]:
    return {s: 0 for s in ChargeStatus}


def _empty_sums() -> dict[ChargeStatus, Decimal]:
    return {s: Decimal("0.00") for s in ChargeStatus}


def aggregate_stats(
    db: Session,
    *,
    status: ChargeStatus | None = None,
    competency_period: str | None = None,
    resident_id: uuid.UUID | None = None,
    as_of: date | None = None,
) -> dict:
    as_of = as_of or billing_today()
    status_expr = effective_status_expr(as_of)

    inner = select(
        status_expr.label("status"),
        Charge.id.label("id"),
        case(
            (status_expr == ChargeStatus.PAID.value, Charge.paid_amount),
            else_=Charge.amount,
        ).label("reported_amount"),
    )
    if competency_period is not None:
        validate_period(competency_period)
        inner = inner.where(Charge.competency_period == competency_period)
    if resident_id is not None:
        inner = inner.where(Charge.resident_id == resident_id)
    sub = inner.subquery()

    stmt = (
        select(sub.c.status, func.count(sub.c.id), func.coalesce(func.sum(sub.c.reported_amount), 0))
        .group_by(sub.c.status)
    )
    if status is not None:
        stmt = stmt.where(sub.c.status == status.value)

    counts = _empty_counts()
    sums = _empty_sums()
    for raw_status, count, total in db.execute(stmt).all():
        st = ChargeStatus(raw_status)
        counts[st] = int(count or 0)
        sums[st] = to_money(total or 0)

    if status is not None:
        counts = {status: counts[status]}
        sums = {status: sums[status]}

    return {"as_of": as_of, "count_by_status": counts, "sum_by_status": sums}


def count_by_status(db: Session, **filters) -> dict[ChargeStatus, int]:
    return aggregate_stats(db, **filters)["count_by_status"]


def sum_amount_by_status(db: Session, **filters) -> dict[ChargeStatus, Decimal]:
    return aggregate_stats(db, **filters)["sum_by_status"]


"""
월별 청구 내역 내보내기 데이터

- 해당 competency period 의 모든 청구 (취소 포함)
- 입주자 이름은 현재 명부 기준, 호수/동은 청구 시점 스냅샷
- 호수 순 정렬

"""

def period_export_rows(db: Session, *, period: str, as_of: date | None = None) -> list[dict]:
    validate_period(period)
    as_of = as_of or billing_today()
    status_expr = effective_status_expr(as_of)

    rows = db.execute(
        select(Charge, Resident.name, status_expr.label("effective_status"))
        .join(Resident, Resident.id == Charge.resident_id, isouter=True)
        .where(Charge.competency_period == period)
        .order_by(Charge.block, Charge.unit, Charge.created_at)
    ).all()

    return [
        {
            "charge": charge,
            "resident_name": name or "",
            "status": ChargeStatus(effective_status),
        }
        for charge, name, effective_status in rows
    ]
