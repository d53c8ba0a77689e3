"""
fee_templates.py

관리비 템플릿(Fee Template) 관리 API 모음.

주요 기능:
- 템플릿 생성 / 목록 / 단건 조회
- 템플릿 수정 (이미 생성된 청구에는 영향 없음)
- 템플릿 비활성화 (멱등)
- 템플릿 삭제 (참조하는 청구가 있으면 409)

설계 원칙:
- 비즈니스 로직은 service 계층(app.services.fee_templates)에 위임
- 이 라우터는 요청/응답 처리와 트랜잭션 커밋/롤백에만 집중

관련 파일:
- app.services.fee_templates : 템플릿 규칙
- app.schemas.billing        : 요청/응답 스키마 정의
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_operator
from app.core.exceptions import BillingError
from app.services.fee_templates import (
    create_template,
    deactivate_template,
    delete_template,
    get_template,
    list_templates,
    update_template,
)
from app.schemas.billing import (
    FeeTemplateCreateRequest,
    FeeTemplateResponse,
    FeeTemplateUpdateRequest,
)

router = APIRouter(prefix="/fee-templates", tags=["fee-templates"])


@router.post("", response_model=FeeTemplateResponse, status_code=201)
def create_fee_template(
    body: FeeTemplateCreateRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        template = create_template(db, **body.model_dump(), operator=operator)
        db.commit()
        db.refresh(template)
        return template
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.get("", response_model=list[FeeTemplateResponse])
def list_fee_templates(
    active: bool | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_templates(db, active=active)


@router.get("/{template_id}", response_model=FeeTemplateResponse)
def read_fee_template(template_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return get_template(db, template_id)
    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


"""
템플릿 수정 API

- 전달된 필드만 변경 (PATCH)
- 이미 생성된 청구의 금액/기한은 바뀌지 않음

"""
@router.patch("/{template_id}", response_model=FeeTemplateResponse)
def update_fee_template(
    template_id: uuid.UUID,
    body: FeeTemplateUpdateRequest,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        template = update_template(db, template_id, body.model_dump(exclude_unset=True), operator=operator)
        db.commit()
        db.refresh(template)
        return template
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.post("/{template_id}/deactivate", response_model=FeeTemplateResponse)
def deactivate_fee_template(
    template_id: uuid.UUID,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        template = deactivate_template(db, template_id, operator=operator)
        db.commit()
        db.refresh(template)
        return template
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise


"""
템플릿 삭제 API

- 취소된 청구를 포함해 하나라도 참조 중이면 409
- 그런 경우 비활성화(deactivate)를 사용해야 함

"""
@router.delete("/{template_id}", status_code=204)
def delete_fee_template(
    template_id: uuid.UUID,
    db: Session = Depends(get_db),
    operator: str | None = Depends(get_operator),
):
    try:
        delete_template(db, template_id, operator=operator)
        db.commit()
    except BillingError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        raise
    return Response(status_code=204)
