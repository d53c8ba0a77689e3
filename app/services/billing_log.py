"""
services/billing_log.py

과금 행위 로그 기록 서비스.

이 파일은 템플릿 / 청구 원장에 변경을 일으킨 행위를
BillingAuditLog 테이블에 기록하는 역할을 담당한다.

서비스 계층에서 호출되며,
로그 기록 자체는 DB에만 영향을 주고
비즈니스 흐름에는 개입하지 않는다.

설계 원칙:
- 로그는 실제 변경과 같은 세션(트랜잭션)에 추가
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계

"""

from sqlalchemy.orm import Session

from app.models.billing_log import BillingAuditLog, BillingAction


"""
과금 행위 로그 기록 함수

- action      : 수행된 행위 유형
- operator    : 행위를 수행한 운영자 (선택)
- template_id : 대상 템플릿 ID (선택)
- charge_id   : 대상 청구 ID (선택)
- detail      : JSON 직렬화 가능한 요약 정보 (선택)

NOTE:
- db.commit()은 호출 측(라우터/서비스)에서 수행

"""
def write_billing_log(
    db: Session,
    *,
    action: BillingAction,
    operator: str | None = None,
    template_id=None,
    charge_id=None,
    detail: dict | None = None,
) -> BillingAuditLog:
    log = BillingAuditLog(
        operator=operator,
        action=action,
        template_id=template_id,
        charge_id=charge_id,
        detail=detail,
    )
    db.add(log)
    return log
