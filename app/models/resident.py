"""
resident.py

입주자(Resident) 모델 정의 파일.

입주자 명부 자체는 외부 시스템(입주자 관리)이 소유하며,
이 테이블은 과금 엔진이 조회하는 최소한의 사본만 유지한다.

- unit / block : 현재 거주 중인 호수 / 동
- status       : ACTIVE 인 입주자만 일괄 청구 기본 대상

"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ResidentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Resident(Base):
    __tablename__ = "residents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    block: Mapped[str | None] = mapped_column(String(20), nullable=True)

    status: Mapped[ResidentStatus] = mapped_column(
        SAEnum(ResidentStatus, name="resident_status"),
        nullable=False,
        default=ResidentStatus.ACTIVE,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
