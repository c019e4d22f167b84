from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import TaskStatus, Priority
from .base import parse_datetime_value, reject_none


# 任务相关模式
class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    deadline: Optional[datetime] = None
    assigned_user_id: Optional[str] = None

    @field_validator('deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


# 任务创建模式
class TaskCreate(TaskBase):
    project_id: str


# 任务更新模式
class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)  # 任务标题
    description: Optional[str] = None  # 任务描述
    status: Optional[TaskStatus] = None  # 任务状态
    priority: Optional[Priority] = None  # 任务优先级
    deadline: Optional[datetime] = None  # 截止日期
    assigned_user_id: Optional[str] = None  # 负责人ID

    check_not_null = field_validator('title', 'status')(reject_none)

    @field_validator('deadline', mode='before')
    @classmethod
    def parse_datetime_string(cls, v):
        return parse_datetime_value(v)


class TaskResponse(TaskBase):
    id: str
    project_id: str
    created_by_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # 允许从 ORM 模型创建
