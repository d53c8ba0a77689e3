import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.services.billing_calendar import billing_today


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeeCategory(str, Enum):
    ORDINARY = "ORDINARY"
    EXTRAORDINARY = "EXTRAORDINARY"
    RESERVE_FUND = "RESERVE_FUND"
    WATER = "WATER"
    GAS = "GAS"
    FINE = "FINE"


class ChargeStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class FeeTemplate(Base):
    """관리비 '템플릿' 레코드.

    active=False 이면 새 일괄 청구에는 사용할 수 없지만
    이미 생성된 청구(Charge)에는 영향을 주지 않는다.
    """

    __tablename__ = "fee_templates"
    __table_args__ = (
        CheckConstraint("default_amount > 0", name="ck_fee_templates_amount_positive"),
        CheckConstraint("due_day BETWEEN 1 AND 28", name="ck_fee_templates_due_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[FeeCategory] = mapped_column(
        SAEnum(FeeCategory, name="fee_category"), nullable=False, default=FeeCategory.ORDINARY
    )

    default_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class Charge(Base):
    """입주자별 '청구(cobrança)' 레코드.

    - source_template_id: None 이면 수동(ad-hoc) 청구
    - unit / block: 생성 시점의 입주자 호수/동 스냅샷 (이사해도 변하지 않음)
    - competency_period: 'YYYY-MM' (수동 청구는 None 가능)
    - status 변경은 app.services.charge_lifecycle 에서만 수행

    (source_template_id, resident_id, competency_period) 는
    CANCELLED 가 아닌 행 사이에서 유일해야 한다 (부분 unique index).
    """

    __tablename__ = "charges"
    __table_args__ = (
        Index(
            "uq_charges_template_resident_period_open",
            "source_template_id",
            "resident_id",
            "competency_period",
            unique=True,
            postgresql_where=text("status <> 'CANCELLED'"),
            sqlite_where=text("status <> 'CANCELLED'"),
        ),
        Index("ix_charges_resident_id", "resident_id"),
        Index("ix_charges_status_due_date", "status", "due_date"),
        Index("ix_charges_competency_period", "competency_period"),
        CheckConstraint("amount > 0", name="ck_charges_amount_positive"),
        CheckConstraint("paid_amount >= 0", name="ck_charges_paid_amount_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    source_template_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("fee_templates.id", ondelete="RESTRICT"), nullable=True
    )
    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("residents.id"), nullable=False)

    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    block: Mapped[str | None] = mapped_column(String(20), nullable=True)

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    competency_period: Mapped[str | None] = mapped_column(String(7), nullable=True)  # YYYY-MM

    status: Mapped[ChargeStatus] = mapped_column(
        SAEnum(ChargeStatus, name="charge_status"), nullable=False, default=ChargeStatus.PENDING
    )
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    external_payment_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_checkout_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    @property
    def effective_status(self) -> ChargeStatus:
        # 스윕 전이라도 기한이 지난 PENDING 은 조회 시점에 OVERDUE 로 보여준다
        if self.status == ChargeStatus.PENDING and self.due_date < billing_today():
            return ChargeStatus.OVERDUE
        return self.status

    @property
    def outstanding_amount(self) -> Decimal:
        return self.amount - (self.paid_amount or Decimal("0"))
