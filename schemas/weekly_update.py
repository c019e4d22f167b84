from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WeeklyUpdateCreate(BaseModel):
    comments: str = Field(..., min_length=1, description="周报内容")


class WeeklyUpdateResponse(BaseModel):
    id: str
    project_id: str
    year: int
    week_number: int
    comments: str
    created_by_user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
