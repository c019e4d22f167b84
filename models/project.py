"""
项目模型模块
包含项目相关的数据模型定义
"""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum, Numeric
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from .enums import ProjectStatus, Priority
from utils.snowflake import generate_project_id


class Project(Base, TimestampMixin):
    """项目表模型"""
    __tablename__ = "projects"

    id = Column(String(25), primary_key=True, index=True, default=generate_project_id, comment='项目ID，格式：P + 雪花算法ID')
    title = Column(String(200), nullable=False, comment='项目名称')
    description = Column(Text, comment='项目描述')
    status = Column(Enum(ProjectStatus), default=ProjectStatus.PENDING, nullable=False, comment='项目状态')
    priority = Column(Enum(Priority), default=Priority.MEDIUM, comment='项目优先级')
    budget = Column(Numeric(15, 2), default=0, comment='项目预算')
    actual_cost = Column(Numeric(15, 2), default=0, comment='实际成本')
    start_date = Column(DateTime, comment='项目开始日期')
    deadline = Column(DateTime, nullable=True, comment='项目截止日期')
    department_id = Column(String(25), ForeignKey("departments.id"), comment='所属部门ID')
    manager_user_id = Column(String(25), ForeignKey("users.id"), comment='项目经理ID')
    created_by_user_id = Column(String(25), ForeignKey("users.id"), comment='项目创建者ID')

    # 关系
    department = relationship("Department", back_populates="projects")
    manager = relationship("User", foreign_keys=[manager_user_id])
    creator = relationship("User", foreign_keys=[created_by_user_id])
    tasks = relationship("Task", back_populates="project")
    milestones = relationship("Milestone", back_populates="project")
    risks_issues = relationship("RiskIssue", back_populates="project")
    weekly_updates = relationship("WeeklyUpdate", back_populates="project")
