"""模型基类模块

时间统一使用应用本地时间（naive datetime），与定时任务中的 datetime.now() 保持一致
"""
from datetime import datetime

from sqlalchemy import Column, DateTime


class TimestampMixin:
    """时间戳混入类"""

    created_at = Column(DateTime, default=datetime.now, nullable=False, comment='创建时间')
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, comment='更新时间')
