"""
reports.py

청구 원장 집계 / 내보내기 API 모음.

대시보드는 클라이언트에서 합계를 따로 계산하지 않고
항상 이 API로 상태별 건수/금액을 다시 조회한다.

주요 기능:
- 상태별 청구 건수 / 금액 합계 (청구 월, 상태 필터)
- 월별 청구 내역 CSV / Excel(xlsx) 내보내기

설계 원칙:
- 읽기 전용 (어떤 데이터도 변경하지 않음)
- 집계 로직은 service 계층(app.services.reports)에 위임

관련 파일:
- app.services.reports : 집계 / 내보내기 데이터 계산
"""

import csv
import io
from starlette.responses import StreamingResponse, Response
from openpyxl import Workbook

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.models.billing import ChargeStatus
from app.services.billing_calendar import validate_period
from app.services.reports import aggregate_stats, period_export_rows
from app.schemas.billing import AggregateStatsResponse

router = APIRouter(prefix="/reports", tags=["reports"])


EXPORT_HEADER = [
    "competency_period", "charge_id", "resident_name", "block", "unit",
    "description", "due_date", "status", "amount", "paid_amount", "paid_at",
]


def _export_row(period: str, r: dict) -> list:
    c = r["charge"]
    return [
        period,
        str(c.id),
        r["resident_name"],
        c.block or "",
        c.unit,
        c.description,
        c.due_date.isoformat(),
        r["status"].value,
        str(c.amount),
        str(c.paid_amount),
        c.paid_at.isoformat() if c.paid_at else "",
    ]


"""
상태별 집계 API

- count_by_status : 상태별 청구 건수
- sum_by_status   : PENDING / OVERDUE / CANCELLED 는 청구 금액, PAID 는 납부 금액 합계
- 기한이 지난 PENDING 은 OVERDUE 로 집계

"""
@router.get("/stats", response_model=AggregateStatsResponse)
def get_aggregate_stats(
    status: ChargeStatus | None = Query(default=None),
    competency_period: str | None = Query(default=None, description="예: 2026-01"),
    db: Session = Depends(get_db),
):
    try:
        return aggregate_stats(db, status=status, competency_period=competency_period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


"""
월별 청구 내역 CSV 다운로드 API

- StreamingResponse로 행 단위 전송
- UTF-8 BOM을 추가하여 Excel에서 한글/포르투갈어 문자가 깨지지 않도록 처리

"""
@router.get("/export")
def export_period_csv(
    period: str = Query(..., description="예: 2026-01"),
    db: Session = Depends(get_db),
):
    try:
        validate_period(period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rows = period_export_rows(db, period=period)

    def generate():
        # Excel에서 UTF-8 CSV 깨짐 방지를 위해 BOM(Byte Order Mark) 먼저 출력
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(EXPORT_HEADER)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for r in rows:
            writer.writerow(_export_row(period, r))
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"charges_{period}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


"""
월별 청구 내역 Excel(xlsx) 다운로드 API

- openpyxl을 사용하여 XLSX 파일 생성
- 금액은 숫자 셀로 저장하여 Excel에서 바로 합계 계산 가능

"""
@router.get("/export.xlsx")
def export_period_xlsx(
    period: str = Query(..., description="예: 2026-01"),
    db: Session = Depends(get_db),
):
    try:
        validate_period(period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rows = period_export_rows(db, period=period)

    wb = Workbook()
    ws = wb.active
    ws.title = "charges"

    ws.append(EXPORT_HEADER)
    for r in rows:
        line = _export_row(period, r)
        line[8] = r["charge"].amount
        line[9] = r["charge"].paid_amount
        ws.append(line)

    buf = io.BytesIO()
    wb.save(buf)

    filename = f"charges_{period}.xlsx"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(
        content=buf.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )
