"""
通知模型模块
"""
from sqlalchemy import Column, String, Text, ForeignKey, Boolean, DateTime
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from utils.snowflake import generate_notification_id


class Notification(Base, TimestampMixin):
    """通知表模型"""
    __tablename__ = "notifications"

    id = Column(String(25), primary_key=True, index=True, default=generate_notification_id, comment='通知ID，格式：N + 雪花算法ID')
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True, comment='接收用户ID')
    message = Column(Text, nullable=False, comment='通知内容')
    related_entity = Column(String(50), comment='关联实体类型，如 Project/Task')
    related_entity_id = Column(String(25), comment='关联实体ID')
    is_read = Column(Boolean, default=False, nullable=False, comment='是否已读')
    requires_approval = Column(Boolean, default=False, nullable=False, comment='是否需要审批')
    last_reminder_sent = Column(DateTime, nullable=True, comment='最后一次提醒时间')

    # 关系
    user = relationship("User", back_populates="notifications")
