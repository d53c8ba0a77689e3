"""

billing_log.py

과금(Billing) 행위 기록(Audit Log) 모델 정의 파일.

템플릿 변경, 일괄 청구 실행, 납부 기록, 청구 취소, 연체 스윕 등
청구 원장(Charge Ledger)에 영향을 주는 행위를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

일괄 청구 요청(BatchGenerationRequest)은 별도 테이블 없이
이 로그의 detail 에만 남는다.

설계 원칙:
- 실제 데이터 변경과 같은 트랜잭션에서 기록
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- operator(행위자)와 대상(template / charge)을 명확히 구분

"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, DateTime, Enum as SAEnum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class BillingAction(str, Enum):
    CREATE_TEMPLATE = "CREATE_TEMPLATE"
    UPDATE_TEMPLATE = "UPDATE_TEMPLATE"
    DEACTIVATE_TEMPLATE = "DEACTIVATE_TEMPLATE"
    DELETE_TEMPLATE = "DELETE_TEMPLATE"
    CREATE_CHARGE = "CREATE_CHARGE"
    GENERATE_BATCH = "GENERATE_BATCH"
    RECORD_PAYMENT = "RECORD_PAYMENT"
    CANCEL_CHARGE = "CANCEL_CHARGE"
    ATTACH_CHECKOUT_REF = "ATTACH_CHECKOUT_REF"
    OVERDUE_SWEEP = "OVERDUE_SWEEP"


"""
과금 행위 로그 모델

- operator    : 행위를 수행한 운영자 식별자 (없으면 시스템 작업)
- action      : 수행된 행위 유형
- template_id : 대상 템플릿 ID (선택)
- charge_id   : 대상 청구 ID (선택)
- detail      : 요청 파라미터 / 결과 요약 (JSON)
- created_at  : 행위 발생 시각 (UTC)

템플릿 삭제 후에도 로그는 남아야 하므로 FK를 걸지 않는다.

"""

class BillingAuditLog(Base):
    __tablename__ = "billing_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    operator: Mapped[str | None] = mapped_column(String(100), nullable=True)
    action: Mapped[BillingAction] = mapped_column(SAEnum(BillingAction, name="billing_action"), nullable=False)

    template_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    charge_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)

    detail: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
