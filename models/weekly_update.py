"""
项目周报模型模块
"""
from sqlalchemy import Column, String, Text, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from utils.snowflake import generate_weekly_update_id


class WeeklyUpdate(Base, TimestampMixin):
    """项目周报表模型"""
    __tablename__ = "weekly_updates"
    __table_args__ = (
        UniqueConstraint("project_id", "year", "week_number", name="uq_weekly_updates_project_week"),
    )

    id = Column(String(25), primary_key=True, index=True, default=generate_weekly_update_id, comment='周报ID，格式：W + 雪花算法ID')
    project_id = Column(String(25), ForeignKey("projects.id"), nullable=False, index=True, comment='所属项目ID')
    year = Column(Integer, nullable=False, comment='年份')
    week_number = Column(Integer, nullable=False, comment='周数')
    comments = Column(Text, nullable=False, comment='周报内容')
    created_by_user_id = Column(String(25), ForeignKey("users.id"), nullable=False, comment='提交人ID')

    # 关系
    project = relationship("Project", back_populates="weekly_updates")
