from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from typing import Optional

from app.models.resident import ResidentStatus


# 🔹 명부 동기화 / 시드용 입주자 등록 요청
class ResidentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    unit: str = Field(..., min_length=1, max_length=20)
    block: Optional[str] = Field(None, max_length=20)
    status: ResidentStatus = ResidentStatus.ACTIVE


# 🔹 입주 / 퇴거 상태 변경 요청
class ResidentStatusUpdate(BaseModel):
    status: ResidentStatus


# 🔹 입주자 응답용
class ResidentResponse(BaseModel):
    id: UUID
    name: str
    unit: str
    block: Optional[str]
    status: ResidentStatus

    model_config = ConfigDict(from_attributes=True)
