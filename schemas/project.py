from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import ProjectStatus, Priority
from .base import parse_datetime_value, reject_none


# 项目相关模式
class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, description="项目名称")
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    budget: Optional[float] = Field(0, ge=0, description="项目预算")
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    department_id: Optional[str] = None
    manager_user_id: Optional[str] = None

    @field_validator('start_date', 'deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    budget: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    manager_user_id: Optional[str] = None

    check_not_null = field_validator('title', 'status')(reject_none)

    @field_validator('start_date', 'deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


class ProjectRejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000, description="驳回原因")


class ProjectResponse(ProjectBase):
    id: str
    status: ProjectStatus
    actual_cost: Optional[float] = 0
    created_by_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
