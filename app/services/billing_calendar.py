"""
services/billing_calendar.py

청구 기간(competency period)과 날짜 계산 규칙 모음.

- competency period 형식 검증 ('YYYY-MM')
- 템플릿의 납부일(due_day)을 청구 월에 적용한 납부 기한 계산
- 연체 판정 기준이 되는 '오늘' 날짜 계산 (BILLING_TIMEZONE 기준)

관련 파일:
- app.services.batch_generation : 납부 기한 계산
- app.models.billing            : Charge.effective_status

"""

import calendar
import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


_PERIOD_RE = re.compile(r"^\d{4}-\d{2}$")


"""
competency period 형식 검증

- 'YYYY-MM' 형식만 허용
- 월(month)은 01 ~ 12 범위만 허용
- 형식이 잘못되면 ValueError 발생

"""

def validate_period(period: str) -> None:
    if not _PERIOD_RE.match(period):
        raise ValueError("period must be in 'YYYY-MM' format")

    month = int(period.split("-")[1])
    if month < 1 or month > 12:
        raise ValueError("month must be between 01 and 12")


"""
납부 기한 계산

- due_day를 period의 월에 적용 (예: 10, '2026-01' -> 2026-01-10)
- 해당 월의 마지막 날보다 크면 마지막 날로 보정

"""

def resolve_due_date(period: str, due_day: int) -> date:
    validate_period(period)
    year, month = (int(p) for p in period.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(due_day, last_day)))


def billing_today() -> date:
    return datetime.now(ZoneInfo(settings.BILLING_TIMEZONE)).date()
