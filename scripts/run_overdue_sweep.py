"""

연체(OVERDUE) 스윕 실행 스크립트.

- 기한이 지난 PENDING 청구를 OVERDUE 로 전환한다.
- 하루에 최소 한 번 실행되어야 하며, 여러 번 실행해도 안전하다 (멱등).
- --as-of 를 생략하면 BILLING_TIMEZONE 기준 오늘 날짜로 실행한다.

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.run_overdue_sweep
- (.venv) ~\backend~$ python -m scripts.run_overdue_sweep --as-of 2026-02-11

cron 예시 (매일 00:10)
- 10 0 * * * cd /srv/backend && .venv/bin/python -m scripts.run_overdue_sweep

"""

import argparse
import logging
from datetime import date

from dotenv import load_dotenv
load_dotenv()

from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.services.billing_calendar import billing_today
from app.services.charge_lifecycle import mark_overdue_sweep

logger = logging.getLogger("scripts.run_overdue_sweep")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Mark past-due pending charges as overdue.")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    args = parser.parse_args(argv)

    setup_logging()
    as_of = args.as_of or billing_today()

    db = SessionLocal()
    try:
        count = mark_overdue_sweep(db, as_of, operator="system:cron")
        db.commit()
        logger.info("overdue sweep done as_of=%s count=%d", as_of, count)
        return count
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
