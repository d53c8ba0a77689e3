"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- 로그 레벨
- 연체(OVERDUE) 판정 기준이 되는 관리 시간대(timezone)
- CORS 허용 도메인 목록

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급

관련 파일:
- app.main                    : CORS / 로깅 / 기동 시 연체 스윕
- app.db.session              : DATABASE_URL 사용
- app.services.billing_calendar : BILLING_TIMEZONE 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    LOG_LEVEL: str = "INFO"

    # '오늘' 날짜 계산 기준 시간대
    # - 연체 판정(due_date < today)은 항상 이 시간대의 날짜로 계산
    BILLING_TIMEZONE: str = "America/Sao_Paulo"

    # 서버 기동 시 1회 연체 스윕 실행 여부
    OVERDUE_SWEEP_ON_STARTUP: bool = True

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]


# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
settings = Settings()
