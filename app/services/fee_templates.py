"""
services/fee_templates.py

관리비 템플릿(Fee Template) 저장소.

단순 CRUD 외에 다음 두 가지 규칙만 가진다.

- deactivate : active=False 로만 변경 (멱등, 기존 청구에는 영향 없음)
- delete     : 템플릿을 참조하는 청구가 하나라도 있으면 ConflictError
               (이 경우 호출 측은 deactivate 를 사용해야 함)

트랜잭션 제어(commit/rollback)는 라우터에서 수행한다.

"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, TemplateNotFoundError
from app.models.billing import Charge, FeeCategory, FeeTemplate
from app.models.billing_log import BillingAction
from app.services.billing_log import write_billing_log
from app.services.money import to_money

logger = logging.getLogger(__name__)

# PATCH 로 변경 가능한 필드
_UPDATABLE_FIELDS = ("name", "description", "category", "default_amount", "due_day", "recurring", "active")
# null 로 되돌릴 수 있는 필드 (나머지는 null 이면 무시)
_NULLABLE_FIELDS = ("description",)


def get_template(db: Session, template_id: uuid.UUID) -> FeeTemplate:
    template = db.get(FeeTemplate, template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


def list_templates(db: Session, *, active: bool | None = None) -> list[FeeTemplate]:
    stmt = select(FeeTemplate).order_by(FeeTemplate.name)
    if active is not None:
        stmt = stmt.where(FeeTemplate.active.is_(active))
    return list(db.scalars(stmt).all())


def create_template(
    db: Session,
    *,
    name: str,
    default_amount: Decimal,
    due_day: int,
    description: str | None = None,
    category: FeeCategory = FeeCategory.ORDINARY,
    recurring: bool = True,
    active: bool = True,
    operator: str | None = None,
) -> FeeTemplate:
    template = FeeTemplate(
        name=name,
        description=description,
        category=category,
        default_amount=to_money(default_amount),
        due_day=due_day,
        recurring=recurring,
        active=active,
    )
    db.add(template)
    db.flush()

    write_billing_log(
        db,
        action=BillingAction.CREATE_TEMPLATE,
        operator=operator,
        template_id=template.id,
        detail={"name": name, "default_amount": str(default_amount), "due_day": due_day},
    )
    logger.info("fee template created id=%s name=%r", template.id, name)
    return template


def update_template(
    db: Session,
    template_id: uuid.UUID,
    patch: dict,
    *,
    operator: str | None = None,
) -> FeeTemplate:
    template = get_template(db, template_id)

    if patch.get("default_amount") is not None:
        patch = {**patch, "default_amount": to_money(patch["default_amount"])}

    changed = {}
    for field in _UPDATABLE_FIELDS:
        if field not in patch:
            continue
        value = patch[field]
        if value is None and field not in _NULLABLE_FIELDS:
            continue
        if getattr(template, field) != value:
            setattr(template, field, value)
            changed[field] = None if value is None else str(value)

    if changed:
        db.flush()
        write_billing_log(
            db,
            action=BillingAction.UPDATE_TEMPLATE,
            operator=operator,
            template_id=template.id,
            detail=changed,
        )
        logger.info("fee template updated id=%s fields=%s", template.id, sorted(changed))
    return template


"""
템플릿 비활성화

- 이미 비활성 상태면 아무 변경 없이 그대로 반환 (멱등)
- 이미 생성된 청구는 수정하지 않음

"""
def deactivate_template(db: Session, template_id: uuid.UUID, *, operator: str | None = None) -> FeeTemplate:
    template = get_template(db, template_id)
    if not template.active:
        return template

    template.active = False
    db.flush()
    write_billing_log(
        db,
        action=BillingAction.DEACTIVATE_TEMPLATE,
        operator=operator,
        template_id=template.id,
    )
    logger.info("fee template deactivated id=%s", template.id)
    return template


def count_template_charges(db: Session, template_id: uuid.UUID) -> int:
    return db.scalar(
        select(func.count()).select_from(Charge).where(Charge.source_template_id == template_id)
    ) or 0


"""
템플릿 삭제

- 취소된 청구를 포함해 하나라도 참조 중이면 ConflictError
- 참조가 없을 때만 실제 행 삭제

"""
def delete_template(db: Session, template_id: uuid.UUID, *, operator: str | None = None) -> None:
    template = get_template(db, template_id)

    references = count_template_charges(db, template_id)
    if references:
        raise ConflictError(
            f"fee template is referenced by {references} charge(s); deactivate it instead"
        )

    db.delete(template)
    db.flush()
    write_billing_log(
        db,
        action=BillingAction.DELETE_TEMPLATE,
        operator=operator,
        template_id=template_id,
        detail={"name": template.name},
    )
    logger.info("fee template deleted id=%s", template_id)
