"""
用户模型模块
包含用户相关的数据模型定义
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from .enums import UserRole
from utils.snowflake import generate_user_id


class User(Base, TimestampMixin):
    """用户表模型"""
    __tablename__ = "users"

    id = Column(String(25), primary_key=True, index=True, default=generate_user_id, comment='用户ID，格式：U + 雪花算法ID')
    username = Column(String(50), unique=True, index=True, nullable=False, comment='用户名，唯一标识')
    email = Column(String(100), unique=True, index=True, nullable=False, comment='邮箱地址，唯一标识')
    password_hash = Column(String(255), nullable=False, comment='密码哈希值')
    name = Column(String(100), comment='用户真实姓名')
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False, comment='用户角色')
    department_id = Column(String(25), ForeignKey("departments.id"), nullable=True, comment='用户所属部门ID')
    is_active = Column(Boolean, default=True, comment='是否激活状态')

    # 关系
    department = relationship("Department", back_populates="users", foreign_keys=[department_id])
    notifications = relationship("Notification", back_populates="user")
