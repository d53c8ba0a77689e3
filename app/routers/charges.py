"""
charges.py

청구(Charge / cobrança) 관리 API 모음.

주요 기능:
- 수동(ad-hoc) 청구 생성
- 청구 목록 조회 (상태 / 입주자 / 청구 월 필터)
- 관리비 템플릿 기반 일괄 청구 생성
- 납부 기록 / 청구 취소 / 결제 세션 식별자 기록
- 연체 스윕 수동 실행

설계 원칙:
- 비즈니스 로직은 service 계층에 위임
  (app.services.charges / charge_lifecycle / batch_generation)
- 이 라우터는 요청/응답 처리와 트랜잭션 커밋/롤백에만 집중
- 도메인 예외(BillingError)는 status_code 그대로 HTTP 응답으로 변환
- 기간 형식 오류(ValueError)는 400

관련 파일:
- app.services.charge_lifecycle : 상태 전이 규칙
- app.services.batch_generation : 일괄 청구 규칙
- app.schemas.billing           : 요청/응답 스키마 정의
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_operator
from app.core.exceptions import BillingError
from app.models.billing import ChargeStatus
from app.services.batch_generation import generate_batch
from app.services.billing_calendar import billing_today
from app.services.charge_lifecycle import (
    attach_checkout_ref,
    cancel_charge,
    mark_overdue_sweep,
    record_payment,
)
from app.services.charges import create_ad_hoc_charge, get_charge, list_charges
from app.schemas.billing import (
    BatchGenerateRequest,
    BatchGenerateResponse,
    CancelRequest,
    ChargeCreateRequest,
    ChargeResponse,
    CheckoutRefRequest,
    OverdueSweepRequest,
    OverdueSweepResponse,
    PaymentCreateRequest,
)

router = APIRouter(prefix="/charges", tags=["charges"])


"""
수동(ad-hoc) 청구 생성 API

- 템플릿 없이 특정 입주자에게 단건 청구
- template_id + competency_period 를 함께 주면 중복 청구 금지 규칙 적용 (409)

"""
@router.post("", response_model=ChargeResponse, status_code=201)
def create_charge(
    body: ChargeCreateRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        charge = create_ad_hoc_charge(db, **body.model_dump(), operator=operator)
        db.commit()
        db.refresh(charge)
        return charge
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.get("", response_model=list[ChargeResponse])
def list_charges_endpoint(
    status: ChargeStatus | None = Query(default=None),
    resident_id: uuid.UUID | None = Query(default=None),
    competency_period: str | None = Query(default=None, description="예: 2026-01"),
    db: Session = Depends(get_db),
):
    try:
        return list_charges(db, status=status, resident_id=resident_id, competency_period=competency_period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


"""
일괄 청구 생성 API

- 템플릿 1개 + 청구 월 -> 대상 입주자별 청구 생성
- 이미 청구된 입주자는 skipped 로 반환 (다시 실행해도 안전)
- 입주자 단위로 커밋되며, 마지막에 실행 기록(감사 로그)만 커밋

"""
@router.post("/batch", response_model=BatchGenerateResponse)
def generate_charges_batch(
    body: BatchGenerateRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        result = generate_batch(
            db,
            template_id=body.template_id,
            competency_period=body.competency_period,
            due_date=body.due_date,
            resident_ids=body.resident_ids,
            operator=operator,
        )
        db.commit()
        return result
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise


"""
연체 스윕 API

- as_of (기본: 오늘) 이전 납부 기한의 PENDING 청구를 OVERDUE 로 전환
- 같은 날짜로 여러 번 호출해도 두 번째부터는 count=0

"""
@router.post("/overdue-sweep", response_model=OverdueSweepResponse)
def run_overdue_sweep(
    body: OverdueSweepRequest | None = None,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    as_of = (body.as_of if body else None) or billing_today()
    try:
        count = mark_overdue_sweep(db, as_of, operator=operator)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return OverdueSweepResponse(as_of=as_of, count=count)


@router.get("/{charge_id}", response_model=ChargeResponse)
def read_charge(charge_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return get_charge(db, charge_id)
    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


"""
납부 기록 API

- 부분 납부는 누적되며 상태는 그대로 유지
- 누적 납부액이 청구 금액에 도달하면 PAID
- PAID / CANCELLED 청구는 409, 0 이하 금액 / 초과 납부는 400

"""
@router.post("/{charge_id}/payments", response_model=ChargeResponse)
def create_payment(
    charge_id: uuid.UUID,
    body: PaymentCreateRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        charge = record_payment(
            db,
            charge_id,
            amount=body.amount,
            paid_at=body.paid_at,
            external_ref=body.external_ref,
            operator=operator,
        )
        db.commit()
        db.refresh(charge)
        return charge
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.post("/{charge_id}/cancel", response_model=ChargeResponse)
def cancel_charge_endpoint(
    charge_id: uuid.UUID,
    body: CancelRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        charge = cancel_charge(db, charge_id, reason=body.reason, operator=operator)
        db.commit()
        db.refresh(charge)
        return charge
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise


# 결제 게이트웨이 결제 세션 식별자 기록 (결제 자체는 외부에서 처리)
@router.put("/{charge_id}/checkout-ref", response_model=ChargeResponse)
def set_checkout_ref(
    charge_id: uuid.UUID,
    body: CheckoutRefRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        charge = attach_checkout_ref(db, charge_id, checkout_ref=body.checkout_ref, operator=operator)
        db.commit()
        db.refresh(charge)
        return charge
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise
