"""
logging.py

애플리케이션 로깅 초기화.

- 각 모듈은 logging.getLogger(__name__) 으로 자신의 logger를 사용
- 루트 logger 설정은 앱 기동 시 이 파일에서 한 번만 수행

"""

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # SQL 로그는 필요할 때만 DEBUG로 올려서 확인
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
