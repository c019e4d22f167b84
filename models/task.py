"""
任务模型模块
包含任务相关的数据模型定义
"""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from .enums import TaskStatus, Priority
from utils.snowflake import generate_task_id


class Task(Base, TimestampMixin):
    """任务表模型"""
    __tablename__ = "tasks"

    id = Column(String(25), primary_key=True, index=True, default=generate_task_id, comment='任务ID，格式：T + 雪花算法ID')
    project_id = Column(String(25), ForeignKey("projects.id"), nullable=False, index=True, comment='任务所属项目ID')
    title = Column(String(200), nullable=False, comment='任务标题')
    description = Column(Text, comment='任务描述')
    status = Column(Enum(TaskStatus), default=TaskStatus.TODO, nullable=False, comment='任务状态')
    priority = Column(Enum(Priority), default=Priority.MEDIUM, comment='任务优先级')
    deadline = Column(DateTime, nullable=True, comment='任务截止时间')
    assigned_user_id = Column(String(25), ForeignKey("users.id"), nullable=True, comment='任务负责人ID')
    created_by_user_id = Column(String(25), ForeignKey("users.id"), comment='任务创建人ID')

    # 关系
    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assigned_user_id])
    milestone_links = relationship("TaskMilestone", back_populates="task", cascade="all, delete-orphan")
