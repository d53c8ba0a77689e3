"""
services/batch_generation.py

관리비 일괄 청구(Batch Generation) 엔진.

하나의 관리비 템플릿을 대상 입주자 전원에 대한
청구(Charge)로 펼쳐서 생성한다.

처리 순서:
1) 대상 입주자 확정 (요청한 입주자 목록, 없으면 ACTIVE 입주자 전원)
2) 템플릿 확인 (없으면 TemplateNotFoundError, 비활성이면 TemplateInactiveError)
3) 납부 기한 확정 (요청 값, 없으면 템플릿 due_day 를 청구 월에 적용)
4) 입주자별로 '생성 또는 건너뜀'

설계 원칙:
- 전체를 하나의 트랜잭션으로 묶지 않고 입주자 단위로 커밋
  -> 한 입주자의 실패가 나머지 수백 건의 청구를 막지 않음
- 같은 (템플릿, 입주자, 기간)의 미취소 청구는 DB 부분 unique index 로
  한 건만 허용되므로, 동시에 두 작업자가 실행해도 중복 청구가 생기지 않음
- 이미 청구된 입주자는 skipped 로 돌려주므로 몇 번을 다시 실행해도 안전
- 자동 재시도는 하지 않음 (재실행은 호출 측 책임)

관련 파일:
- app.services.charges          : 기존 청구 조회
- app.services.residents        : 입주자 명부 조회
- app.services.billing_calendar : 기간 검증 / 납부 기한 계산

"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import EmptyPopulationError, TemplateInactiveError
from app.models.billing import Charge, ChargeStatus
from app.models.billing_log import BillingAction
from app.models.resident import ResidentStatus
from app.services.billing_calendar import resolve_due_date, validate_period
from app.services.billing_log import write_billing_log
from app.services.charges import find_open_charge, is_open_charge_conflict
from app.services.money import to_money
from app.services.fee_templates import get_template
from app.services.residents import get_resident, list_active_residents

logger = logging.getLogger(__name__)


SKIP_ALREADY_BILLED = "already billed"
SKIP_NOT_FOUND = "resident not found"
SKIP_INACTIVE = "resident inactive"
SKIP_STORAGE_ERROR = "storage error"


def _dedupe(ids: list[uuid.UUID]) -> list[uuid.UUID]:
    seen = set()
    out = []
    for rid in ids:
        if rid not in seen:
            seen.add(rid)
            out.append(rid)
    return out


def resolve_population(db: Session, resident_ids: list[uuid.UUID] | None) -> list[uuid.UUID]:
    if resident_ids:
        return _dedupe(resident_ids)
    return [r.id for r in list_active_residents(db)]


"""
일괄 청구 생성

- 반환 값의 created 는 (resident_id, charge_id) 목록
- skipped 는 (resident_id, reason) 목록
- 입주자 단위로 커밋하므로 호출 측은 마지막에 감사 로그만 커밋하면 됨

"""

def generate_batch(
    db: Session,
    *,
    template_id: uuid.UUID,
    competency_period: str,
    due_date: date | None = None,
    resident_ids: list[uuid.UUID] | None = None,
    operator: str | None = None,
) -> dict:
    validate_period(competency_period)

    explicit = bool(resident_ids)
    population = resolve_population(db, resident_ids)
    if not population:
        raise EmptyPopulationError()

    template = get_template(db, template_id)
    if not template.active:
        raise TemplateInactiveError(template_id)

    if due_date is None:
        due_date = resolve_due_date(competency_period, template.due_day)

    amount: Decimal = to_money(template.default_amount)
    description = f"{template.name} {competency_period}"

    # 조회만 한 상태의 트랜잭션을 정리하고 입주자 단위 커밋을 시작
    db.commit()

    created: list[dict] = []
    skipped: list[dict] = []

    for resident_id in population:
        try:
            resident = get_resident(db, resident_id)
            if resident is None:
                skipped.append({"resident_id": resident_id, "reason": SKIP_NOT_FOUND})
                continue
            if explicit and resident.status != ResidentStatus.ACTIVE:
                skipped.append({"resident_id": resident_id, "reason": SKIP_INACTIVE})
                continue

            if find_open_charge(
                db, template_id=template_id, resident_id=resident_id, competency_period=competency_period
            ):
                skipped.append({"resident_id": resident_id, "reason": SKIP_ALREADY_BILLED})
                continue

            charge_id = uuid.uuid4()
            db.add(
                Charge(
                    id=charge_id,
                    source_template_id=template_id,
                    resident_id=resident_id,
                    unit=resident.unit,
                    block=resident.block,
                    description=description,
                    amount=amount,
                    due_date=due_date,
                    competency_period=competency_period,
                    status=ChargeStatus.PENDING,
                    paid_amount=Decimal("0.00"),
                )
            )
            db.commit()
            created.append({"resident_id": resident_id, "charge_id": charge_id})

        except IntegrityError as e:
            db.rollback()
            if is_open_charge_conflict(e):
                # 다른 작업자가 같은 입주자 청구를 먼저 만든 경우
                logger.debug("lost insert race resident=%s template=%s", resident_id, template_id)
                skipped.append({"resident_id": resident_id, "reason": SKIP_ALREADY_BILLED})
            else:
                logger.warning("batch insert rejected resident=%s: %s", resident_id, e.orig)
                skipped.append({"resident_id": resident_id, "reason": SKIP_STORAGE_ERROR})

        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("batch insert failed resident=%s: %s", resident_id, type(e).__name__)
            skipped.append({"resident_id": resident_id, "reason": SKIP_STORAGE_ERROR})

    write_billing_log(
        db,
        action=BillingAction.GENERATE_BATCH,
        operator=operator,
        template_id=template_id,
        detail={
            "competency_period": competency_period,
            "due_date": due_date.isoformat(),
            "resident_ids": [str(r) for r in resident_ids] if explicit else None,
            "created": len(created),
            "skipped": len(skipped),
        },
    )
    logger.info(
        "batch generated template=%s period=%s created=%d skipped=%d",
        template_id, competency_period, len(created), len(skipped),
    )

    return {
        "template_id": template_id,
        "competency_period": competency_period,
        "due_date": due_date,
        "created": created,
        "skipped": skipped,
    }
