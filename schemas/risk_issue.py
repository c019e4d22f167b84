from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import RiskType, RiskStatus, Priority, RiskSourceKind
from .base import reject_none


class RiskIssueCreate(BaseModel):
    project_id: str
    type: RiskType = RiskType.RISK
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM


class RiskIssueUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, min_length=1)
    priority: Optional[Priority] = None
    status: Optional[RiskStatus] = None
    type: Optional[RiskType] = None

    check_not_null = field_validator('title', 'description', 'status', 'type')(reject_none)


class RiskIssueResponse(BaseModel):
    id: str
    project_id: str
    type: RiskType
    title: str
    description: str
    priority: Priority
    status: RiskStatus
    created_by_user_id: Optional[str] = None
    source_kind: Optional[RiskSourceKind] = None
    source_entity_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
