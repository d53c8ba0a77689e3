import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Dict

from pydantic import AliasChoices, BaseModel, Field, ConfigDict

from app.models.billing import ChargeStatus, FeeCategory


PeriodStr = str  # 'YYYY-MM' (검증은 service 에서 체크)


class FeeTemplateCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=120, examples=["Taxa Ordinária"])
    description: Optional[str] = None
    category: FeeCategory = FeeCategory.ORDINARY
    default_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, examples=["350.00"])
    due_day: int = Field(10, ge=1, le=28)
    recurring: bool = True
    active: bool = True


class FeeTemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=120)
    description: Optional[str] = None
    category: Optional[FeeCategory] = None
    default_amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    due_day: Optional[int] = Field(None, ge=1, le=28)
    recurring: Optional[bool] = None
    active: Optional[bool] = None


class FeeTemplateResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    category: FeeCategory
    default_amount: Decimal
    due_day: int
    recurring: bool
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChargeCreateRequest(BaseModel):
    resident_id: uuid.UUID
    description: str = Field(..., min_length=3, max_length=255)
    amount: Decimal = Field(..., max_digits=12, decimal_places=2, examples=["120.00"])
    due_date: date
    notes: Optional[str] = None
    template_id: Optional[uuid.UUID] = None
    competency_period: Optional[PeriodStr] = Field(None, examples=["2026-01"])


class ChargeResponse(BaseModel):
    id: uuid.UUID
    source_template_id: Optional[uuid.UUID]
    resident_id: uuid.UUID
    unit: str
    block: Optional[str]
    description: str
    amount: Decimal
    due_date: date
    competency_period: Optional[PeriodStr]
    # 조회 시점 기준 유효 상태 (기한이 지난 PENDING 은 OVERDUE)
    status: ChargeStatus = Field(validation_alias=AliasChoices("effective_status", "status"))
    paid_amount: Decimal
    paid_at: Optional[datetime]
    external_payment_ref: Optional[str]
    external_checkout_ref: Optional[str]
    notes: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchGenerateRequest(BaseModel):
    template_id: uuid.UUID
    competency_period: PeriodStr = Field(..., examples=["2026-02"])
    due_date: Optional[date] = None
    resident_ids: Optional[List[uuid.UUID]] = None


class BatchCreatedItem(BaseModel):
    resident_id: uuid.UUID
    charge_id: uuid.UUID


class BatchSkippedItem(BaseModel):
    resident_id: uuid.UUID
    reason: str


class BatchGenerateResponse(BaseModel):
    template_id: uuid.UUID
    competency_period: PeriodStr
    due_date: date
    created: List[BatchCreatedItem]
    skipped: List[BatchSkippedItem]


class PaymentCreateRequest(BaseModel):
    # 0 이하 금액은 service 에서 InvalidAmountError 로 처리
    amount: Decimal = Field(..., max_digits=12, decimal_places=2, examples=["200.00"])
    paid_at: Optional[datetime] = None
    external_ref: Optional[str] = Field(None, max_length=255)


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500, examples=["resident moved out"])


class CheckoutRefRequest(BaseModel):
    checkout_ref: str = Field(..., min_length=1, max_length=255)


class OverdueSweepRequest(BaseModel):
    as_of: Optional[date] = None


class OverdueSweepResponse(BaseModel):
    as_of: date
    count: int


class AggregateStatsResponse(BaseModel):
    as_of: date
    count_by_status: Dict[ChargeStatus, int]
    sum_by_status: Dict[ChargeStatus, Decimal]


class ResidentBalanceResponse(BaseModel):
    resident_id: uuid.UUID
    open_charges: int = 0
    outstanding_total: Decimal = Decimal("0.00")
    overdue_total: Decimal = Decimal("0.00")
