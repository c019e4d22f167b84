"""
里程碑模型模块
包含里程碑及任务-里程碑关联的数据模型定义
"""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum, Integer, Float, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from .enums import MilestoneStatus
from utils.snowflake import generate_milestone_id, generate_task_milestone_id


class Milestone(Base, TimestampMixin):
    """里程碑表模型

    completion_percentage 和 status 始终由关联任务计算得出
    """
    __tablename__ = "milestones"

    id = Column(String(25), primary_key=True, index=True, default=generate_milestone_id, comment='里程碑ID，格式：M + 雪花算法ID')
    project_id = Column(String(25), ForeignKey("projects.id"), nullable=False, index=True, comment='所属项目ID')
    title = Column(String(200), nullable=False, comment='里程碑标题')
    description = Column(Text, comment='里程碑描述')
    deadline = Column(DateTime, nullable=True, comment='里程碑截止时间')
    completion_percentage = Column(Integer, default=0, nullable=False, comment='完成百分比 0-100')
    status = Column(Enum(MilestoneStatus), default=MilestoneStatus.NOT_STARTED, nullable=False, comment='里程碑状态')

    # 关系
    project = relationship("Project", back_populates="milestones")
    task_links = relationship("TaskMilestone", back_populates="milestone", cascade="all, delete-orphan")


class TaskMilestone(Base, TimestampMixin):
    """任务-里程碑关联表模型（带权重）"""
    __tablename__ = "task_milestones"
    __table_args__ = (
        UniqueConstraint("task_id", "milestone_id", name="uq_task_milestones_task_milestone"),
    )

    id = Column(String(27), primary_key=True, index=True, default=generate_task_milestone_id, comment='关联ID，格式：TM + 雪花算法ID')
    task_id = Column(String(25), ForeignKey("tasks.id"), nullable=False, index=True, comment='任务ID')
    milestone_id = Column(String(25), ForeignKey("milestones.id"), nullable=False, index=True, comment='里程碑ID')
    weight = Column(Float, nullable=True, default=1, comment='权重，为空或0时按1计算')

    # 关系
    task = relationship("Task", back_populates="milestone_links")
    milestone = relationship("Milestone", back_populates="task_links")
