"""
services/charge_lifecycle.py

청구 상태(Status) 생명주기 관리.

Charge.status 를 변경하는 유일한 계층이며,
아래 전이 표(_TRANSITIONS)에 없는 변경은 허용하지 않는다.

    PENDING -> PAID / OVERDUE / CANCELLED
    OVERDUE -> PAID / CANCELLED
    PAID, CANCELLED : 종료 상태 (어떤 전이도 불가)

주요 기능:
- record_payment      : 납부 기록 (부분 납부 누적, 완납 시 PAID)
- cancel_charge       : 청구 취소 (중복 청구 제약 해제)
- mark_overdue_sweep  : 기한 경과 PENDING -> OVERDUE 일괄 전환
- attach_checkout_ref : 결제 게이트웨이 결제 세션 식별자 기록

설계 원칙:
- 같은 청구에 대한 납부/취소는 행 잠금(SELECT ... FOR UPDATE)으로 직렬화
- 연체 스윕은 WHERE status = 'PENDING' 조건부 UPDATE 로만 수행하여
  같은 순간 완납된 청구는 OVERDUE 로 바뀌지 않음
- 초과 납부는 잘라내지 않고 OverpaymentError 로 거절

관련 파일:
- app.services.charges   : 청구 조회 / 행 잠금 조회
- app.routers.charges    : 청구 API

"""

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    InvalidAmountError,
    OverpaymentError,
    TerminalStateError,
)
from app.models.billing import Charge, ChargeStatus
from app.models.billing_log import BillingAction
from app.services.billing_calendar import billing_today
from app.services.billing_log import write_billing_log
from app.services.charges import get_charge_for_update
from app.services.money import to_money

logger = logging.getLogger(__name__)


_TRANSITIONS: dict[ChargeStatus, frozenset[ChargeStatus]] = {
    ChargeStatus.PENDING: frozenset({ChargeStatus.PAID, ChargeStatus.OVERDUE, ChargeStatus.CANCELLED}),
    ChargeStatus.OVERDUE: frozenset({ChargeStatus.PAID, ChargeStatus.CANCELLED}),
    ChargeStatus.PAID: frozenset(),
    ChargeStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in _TRANSITIONS.items() if not targets)


def can_transition(current: ChargeStatus, target: ChargeStatus) -> bool:
    return target in _TRANSITIONS[current]


def _transition(charge: Charge, target: ChargeStatus) -> None:
    if charge.status in TERMINAL_STATUSES:
        raise TerminalStateError(charge.status)
    if not can_transition(charge.status, target):
        raise ConflictError(f"cannot move charge from {charge.status.value} to {target.value}")
    charge.status = target


def _ensure_mutable(charge: Charge) -> None:
    if charge.status in TERMINAL_STATUSES:
        raise TerminalStateError(charge.status)


"""
납부 기록

- PAID / CANCELLED 청구는 TerminalStateError
- 0 이하 금액은 InvalidAmountError
- 누적 납부액이 청구 금액을 넘으면 OverpaymentError
- 누적 납부액이 청구 금액에 도달하면 PAID 로 전이하고 paid_at 기록
- 부분 납부는 상태를 바꾸지 않음 (PENDING / OVERDUE 유지)

"""

def record_payment(
    db: Session,
    charge_id: uuid.UUID,
    *,
    amount: Decimal,
    paid_at: datetime | None = None,
    external_ref: str | None = None,
    operator: str | None = None,
) -> Charge:
    charge = get_charge_for_update(db, charge_id)
    _ensure_mutable(charge)

    if amount is None:
        raise InvalidAmountError()
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmountError()

    new_paid = to_money(charge.paid_amount or 0) + amount
    if new_paid > charge.amount:
        raise OverpaymentError(to_money(charge.outstanding_amount))

    charge.paid_amount = new_paid
    if external_ref:
        charge.external_payment_ref = external_ref

    settled = new_paid >= charge.amount
    if settled:
        _transition(charge, ChargeStatus.PAID)
        charge.paid_at = paid_at or datetime.now(timezone.utc)

    db.flush()

    write_billing_log(
        db,
        action=BillingAction.RECORD_PAYMENT,
        operator=operator,
        template_id=charge.source_template_id,
        charge_id=charge.id,
        detail={
            "amount": str(amount),
            "paid_amount": str(new_paid),
            "paid_at": paid_at.isoformat() if paid_at else None,
            "external_ref": external_ref,
            "settled": settled,
        },
    )
    logger.info(
        "payment recorded charge=%s amount=%s paid=%s/%s status=%s",
        charge.id, amount, new_paid, charge.amount, charge.status.value,
    )
    return charge


"""
청구 취소

- PAID 청구는 취소 불가 (이미 취소된 청구도 종료 상태로 간주)
- 사유(reason)는 notes 에 누적 기록
- 취소된 청구는 중복 청구 제약에서 제외되므로
  같은 템플릿 / 기간으로 다시 일괄 청구할 수 있음

"""

def cancel_charge(
    db: Session,
    charge_id: uuid.UUID,
    *,
    reason: str,
    operator: str | None = None,
) -> Charge:
    charge = get_charge_for_update(db, charge_id)
    before = charge.status

    _transition(charge, ChargeStatus.CANCELLED)

    line = f"Cancelled: {reason}"
    charge.notes = f"{charge.notes}\n{line}" if charge.notes else line
    db.flush()

    write_billing_log(
        db,
        action=BillingAction.CANCEL_CHARGE,
        operator=operator,
        template_id=charge.source_template_id,
        charge_id=charge.id,
        detail={"reason": reason, "before": before.value},
    )
    logger.info("charge cancelled id=%s before=%s", charge.id, before.value)
    return charge


"""
연체 스윕

- as_of 보다 납부 기한이 이른 PENDING 청구를 OVERDUE 로 전환
- 이미 OVERDUE / PAID / CANCELLED 인 청구는 건드리지 않음 (멱등)
- 변경된 건수를 반환

"""

def mark_overdue_sweep(
    db: Session,
    as_of: date | None = None,
    *,
    operator: str | None = None,
) -> int:
    as_of = as_of or billing_today()

    result = db.execute(
        update(Charge)
        .where(Charge.status == ChargeStatus.PENDING)
        .where(Charge.due_date < as_of)
        .values(status=ChargeStatus.OVERDUE, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session="fetch")
    )
    count = result.rowcount or 0

    if count:
        write_billing_log(
            db,
            action=BillingAction.OVERDUE_SWEEP,
            operator=operator,
            detail={"as_of": as_of.isoformat(), "count": count},
        )
    logger.info("overdue sweep as_of=%s affected=%d", as_of, count)
    return count


def attach_checkout_ref(
    db: Session,
    charge_id: uuid.UUID,
    *,
    checkout_ref: str,
    operator: str | None = None,
) -> Charge:
    charge = get_charge_for_update(db, charge_id)
    _ensure_mutable(charge)

    charge.external_checkout_ref = checkout_ref
    db.flush()

    write_billing_log(
        db,
        action=BillingAction.ATTACH_CHECKOUT_REF,
        operator=operator,
        charge_id=charge.id,
        detail={"checkout_ref": checkout_ref},
    )
    return charge
