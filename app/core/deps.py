from typing import Generator

from fastapi import Header
from sqlalchemy.orm import Session

from app.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 인증은 외부 계층(게이트웨이/프론트 서버)에서 처리하고
# 요청을 보낸 운영자 식별자만 헤더로 전달받아 감사 로그에 남긴다.
def get_operator(x_operator: str | None = Header(default=None)) -> str | None:
    if x_operator is None:
        return None
    operator = x_operator.strip()
    return operator[:100] or None
