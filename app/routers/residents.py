import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.models.resident import ResidentStatus
from app.schemas.billing import ResidentBalanceResponse
from app.schemas.resident import ResidentCreate, ResidentResponse, ResidentStatusUpdate
from app.services.charges import resident_balance
from app.services.residents import get_resident, list_residents, register_resident, set_resident_status


router = APIRouter(prefix="/residents", tags=["residents"])


# 외부 입주자 명부와 동기화할 때 사용하는 등록 엔드포인트
@router.post("", response_model=ResidentResponse, status_code=201)
def create_resident(body: ResidentCreate, db: Session = Depends(get_db)):
    try:
        resident = register_resident(db, **body.model_dump())
        db.commit()
        db.refresh(resident)
        return resident
    except Exception:
        db.rollback()
        raise


@router.get("", response_model=list[ResidentResponse])
def list_residents_endpoint(
    status: ResidentStatus | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_residents(db, status=status)


# 입주 / 퇴거 처리 (이미 생성된 청구의 호수 스냅샷은 바뀌지 않음)
@router.patch("/{resident_id}/status", response_model=ResidentResponse)
def update_resident_status(
    resident_id: uuid.UUID,
    body: ResidentStatusUpdate,
    db: Session = Depends(get_db),
):
    resident = get_resident(db, resident_id)
    if not resident:
        raise HTTPException(status_code=404, detail="resident not found")

    try:
        set_resident_status(db, resident, body.status)
        db.commit()
        db.refresh(resident)
        return resident
    except Exception:
        db.rollback()
        raise


"""
입주자 미납 잔액 조회 API

- PENDING / OVERDUE 청구의 남은 금액 합계
- 그 중 연체(OVERDUE) 금액을 따로 반환

"""
@router.get("/{resident_id}/balance", response_model=ResidentBalanceResponse)
def read_resident_balance(resident_id: uuid.UUID, db: Session = Depends(get_db)):
    if not get_resident(db, resident_id):
        raise HTTPException(status_code=404, detail="resident not found")
    return resident_balance(db, resident_id=resident_id)
