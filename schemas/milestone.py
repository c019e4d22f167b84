from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import MilestoneStatus
from .base import parse_datetime_value, reject_none


# 里程碑相关模式（完成度和状态不允许客户端直接设置）
class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None

    @field_validator('deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None

    check_not_null = field_validator('title')(reject_none)

    @field_validator('deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


class MilestoneResponse(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    completion_percentage: int = 0
    status: MilestoneStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# 任务-里程碑关联模式
class TaskMilestoneCreate(BaseModel):
    milestone_id: str
    weight: Optional[float] = Field(None, ge=0, description="权重，为空或0时按1计算")


class TaskMilestoneUpdate(BaseModel):
    weight: Optional[float] = Field(None, ge=0, description="权重，为空或0时按1计算")


class TaskMilestoneResponse(BaseModel):
    id: str
    task_id: str
    milestone_id: str
    weight: Optional[float] = None

    class Config:
        from_attributes = True


class TaskMilestoneResult(BaseModel):
    """关联变更结果：关联本身已提交，recalculated 表示里程碑重算是否成功"""
    link: Optional[TaskMilestoneResponse] = None
    milestone_id: str
    recalculated: bool
