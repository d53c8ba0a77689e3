"""
services/residents.py

입주자 명부(Resident Directory) 조회 인터페이스.

과금 엔진은 입주자 데이터를 소유하지 않으며
아래 두 함수로만 명부를 조회한다.

- list_active_residents : 일괄 청구 기본 대상 (ACTIVE 입주자)
- get_resident          : 단건 조회 (없으면 None)

명부 등록/상태 변경 함수는 외부 명부와의 동기화 및
로컬 개발/테스트용 시드 데이터 입력에 사용된다.

"""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.resident import Resident, ResidentStatus


def list_active_residents(db: Session) -> list[Resident]:
    return list(
        db.scalars(
            select(Resident)
            .where(Resident.status == ResidentStatus.ACTIVE)
            .order_by(Resident.block, Resident.unit)
        ).all()
    )


def get_resident(db: Session, resident_id: uuid.UUID) -> Resident | None:
    return db.get(Resident, resident_id)


def list_residents(db: Session, *, status: ResidentStatus | None = None) -> list[Resident]:
    stmt = select(Resident).order_by(Resident.block, Resident.unit)
    if status is not None:
        stmt = stmt.where(Resident.status == status)
    return list(db.scalars(stmt).all())


def register_resident(
    db: Session,
    *,
    name: str,
    unit: str,
    block: str | None = None,
    status: ResidentStatus = ResidentStatus.ACTIVE,
) -> Resident:
    resident = Resident(name=name, unit=unit, block=block, status=status)
    db.add(resident)
    db.flush()
    return resident


def set_resident_status(db: Session, resident: Resident, status: ResidentStatus) -> Resident:
    resident.status = status
    db.flush()
    return resident
