"""
session.py

DB Engine / SessionLocal 생성.

- 요청 처리: app.core.deps.get_db 가 요청마다 SessionLocal 을 열고 닫음
- 라우터 밖(기동 시 연체 스윕, cron 스크립트)은 SessionLocal 을 직접 사용
- 운영은 PostgreSQL, 로컬 개발은 SQLite URL 도 허용

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def engine_kwargs(url: str) -> dict:
    # SQLite 커넥션을 요청 스레드와 스윕 스레드가 같이 쓸 수 있도록 허용
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


# pool_pre_ping: 장시간 유휴 후 끊어진 커넥션 감지
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    **engine_kwargs(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
