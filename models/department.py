"""
部门模型模块
"""
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from utils.snowflake import generate_department_id


class Department(Base, TimestampMixin):
    """部门表模型"""
    __tablename__ = "departments"

    id = Column(String(25), primary_key=True, index=True, default=generate_department_id, comment='部门ID，格式：D + 雪花算法ID')
    name = Column(String(100), nullable=False, comment='部门名称')
    code = Column(String(50), comment='部门编码')
    description = Column(Text, comment='部门描述')
    director_user_id = Column(String(25), nullable=True, comment='部门主管ID')

    # 关系
    users = relationship("User", back_populates="department", foreign_keys="User.department_id")
    projects = relationship("Project", back_populates="department")
