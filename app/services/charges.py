"""
services/charges.py

청구 원장(Charge Ledger) 데이터 접근 로직 모음.

이 파일은 청구(Charge) 조회, 수동(ad-hoc) 청구 생성,
입주자별 미납 잔액 계산을 담당한다.
상태(status) 변경은 app.services.charge_lifecycle 에서만 수행한다.

설계 원칙:
- 조회 시 상태는 '유효 상태(effective status)'로 계산
  (PENDING 이면서 납부 기한이 지난 청구는 스윕 전이라도 OVERDUE)
- 중복 청구 방지는 DB 부분 unique index 로 보장하고
  IntegrityError 는 ConflictError 로 변환
- 금액은 항상 소수점 2자리 Decimal 로 정규화

관련 파일:
- app.models.billing               : FeeTemplate / Charge 모델
- app.services.charge_lifecycle    : 납부 / 취소 / 연체 스윕
- app.services.batch_generation    : 일괄 청구 생성

"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import String, and_, case, cast, func, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ChargeNotFoundError,
    ConflictError,
    InvalidAmountError,
    ResidentNotFoundError,
)
from app.models.billing import Charge, ChargeStatus
from app.models.billing_log import BillingAction
from app.services.billing_calendar import billing_today, validate_period
from app.services.billing_log import write_billing_log
from app.services.fee_templates import get_template
from app.services.money import to_money
from app.services.residents import get_resident

logger = logging.getLogger(__name__)

OPEN_STATUSES = (ChargeStatus.PENDING, ChargeStatus.OVERDUE)
OPEN_CHARGE_INDEX = "uq_charges_template_resident_period_open"


def effective_status_expr(as_of: date):
    """조회 시점 기준 유효 상태를 문자열로 돌려주는 SQL 식."""
    return case(
        (
            and_(Charge.status == ChargeStatus.PENDING, Charge.due_date < as_of),
            literal(ChargeStatus.OVERDUE.value),
        ),
        else_=cast(Charge.status, String),
    )


def get_charge(db: Session, charge_id: uuid.UUID) -> Charge:
    charge = db.get(Charge, charge_id)
    if charge is None:
        raise ChargeNotFoundError(charge_id)
    return charge


# 같은 청구에 대한 동시 납부/취소를 직렬화하기 위한 행 잠금 조회
def get_charge_for_update(db: Session, charge_id: uuid.UUID) -> Charge:
    charge = db.scalar(
        select(Charge)
        .where(Charge.id == charge_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if charge is None:
        raise ChargeNotFoundError(charge_id)
    return charge


# (템플릿, 입주자, 기간) 부분 unique index 위반인지 판별
# - PostgreSQL: 메시지에 index 이름 포함
# - SQLite: "UNIQUE constraint failed: charges.source_template_id, ..."
def is_open_charge_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return OPEN_CHARGE_INDEX in message or "charges.source_template_id" in message


def find_open_charge(
    db: Session,
    *,
    template_id: uuid.UUID,
    resident_id: uuid.UUID,
    competency_period: str,
) -> Charge | None:
    return db.scalar(
        select(Charge)
        .where(Charge.source_template_id == template_id)
        .where(Charge.resident_id == resident_id)
        .where(Charge.competency_period == competency_period)
        .where(Charge.status != ChargeStatus.CANCELLED)
    )


"""
청구 목록 조회

- status          : 유효 상태 기준 필터 (PENDING 은 기한이 남은 청구만)
- resident_id     : 특정 입주자
- competency_period : 특정 청구 월
- 납부 기한 오름차순, 동일 기한은 호수 순

"""

def list_charges(
    db: Session,
    *,
    status: ChargeStatus | None = None,
    resident_id: uuid.UUID | None = None,
    competency_period: str | None = None,
    as_of: date | None = None,
) -> list[Charge]:
    as_of = as_of or billing_today()

    stmt = select(Charge).order_by(Charge.due_date, Charge.block, Charge.unit, Charge.created_at)
    if status is not None:
        stmt = stmt.where(effective_status_expr(as_of) == status.value)
    if resident_id is not None:
        stmt = stmt.where(Charge.resident_id == resident_id)
    if competency_period is not None:
        validate_period(competency_period)
        stmt = stmt.where(Charge.competency_period == competency_period)

    return list(db.scalars(stmt).all())


"""
수동(ad-hoc) 청구 생성

- 금액은 0보다 커야 함
- 입주자의 현재 호수/동을 스냅샷으로 복사
- template_id 와 competency_period 가 모두 주어지면
  일괄 청구와 동일하게 중복 청구 금지 규칙이 적용됨

"""

def create_ad_hoc_charge(
    db: Session,
    *,
    resident_id: uuid.UUID,
    description: str,
    amount: Decimal,
    due_date: date,
    notes: str | None = None,
    template_id: uuid.UUID | None = None,
    competency_period: str | None = None,
    operator: str | None = None,
) -> Charge:
    # 반올림 후 0 이 되는 금액(예: 0.004)도 거절
    if amount is None:
        raise InvalidAmountError()
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmountError()

    if competency_period is not None:
        validate_period(competency_period)

    resident = get_resident(db, resident_id)
    if resident is None:
        raise ResidentNotFoundError(resident_id)

    if template_id is not None:
        get_template(db, template_id)

    if template_id is not None and competency_period is not None:
        existing = find_open_charge(
            db, template_id=template_id, resident_id=resident_id, competency_period=competency_period
        )
        if existing:
            raise ConflictError("charge for that template, resident and period already exists")

    charge = Charge(
        source_template_id=template_id,
        resident_id=resident.id,
        unit=resident.unit,
        block=resident.block,
        description=description,
        amount=amount,
        due_date=due_date,
        competency_period=competency_period,
        status=ChargeStatus.PENDING,
        paid_amount=Decimal("0.00"),
        notes=notes,
    )
    db.add(charge)
    try:
        db.flush()
    except IntegrityError as e:
        if is_open_charge_conflict(e):
            raise ConflictError("charge for that template, resident and period already exists") from e
        raise

    write_billing_log(
        db,
        action=BillingAction.CREATE_CHARGE,
        operator=operator,
        template_id=template_id,
        charge_id=charge.id,
        detail={"resident_id": str(resident.id), "amount": str(charge.amount), "due_date": due_date.isoformat()},
    )
    logger.info("ad-hoc charge created id=%s resident=%s amount=%s", charge.id, resident.id, charge.amount)
    return charge


"""
입주자 미납 잔액 계산

- PENDING / OVERDUE 청구의 (amount - paid_amount) 합
- overdue_total 은 유효 상태가 OVERDUE 인 청구만 합산

"""

def resident_balance(db: Session, *, resident_id: uuid.UUID, as_of: date | None = None) -> dict:
    as_of = as_of or billing_today()
    status_expr = effective_status_expr(as_of)
    outstanding = Charge.amount - Charge.paid_amount

    row = db.execute(
        select(
            func.count(Charge.id),
            func.coalesce(func.sum(outstanding), 0),
            func.coalesce(
                func.sum(case((status_expr == ChargeStatus.OVERDUE.value, outstanding), else_=0)), 0
            ),
        )
        .where(Charge.resident_id == resident_id)
        .where(Charge.status.in_(OPEN_STATUSES))
    ).one()

    return {
        "resident_id": resident_id,
        "open_charges": int(row[0] or 0),
        "outstanding_total": to_money(row[1] or 0),
        "overdue_total": to_money(row[2] or 0),
    }
