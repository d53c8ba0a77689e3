"""
base.py

과금 도메인 ORM 모델의 공통 Base.

- residents / fee_templates / charges / billing_audit_logs 테이블이
  모두 이 Base.metadata 에 등록된다.
- 테스트(conftest)는 이 metadata 로 스키마를 생성/삭제하고
  Alembic 스크립트는 같은 테이블 정의를 마이그레이션으로 유지한다.

"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
