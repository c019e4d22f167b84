"""
风险/问题模型模块
"""
from sqlalchemy import Column, String, Text, ForeignKey, Enum, Index, text
from sqlalchemy.orm import relationship

from .database import Base
from .base import TimestampMixin
from .enums import RiskType, RiskStatus, Priority, RiskSourceKind
from utils.snowflake import generate_risk_issue_id

# 未关闭的记录在 (source_kind, source_entity_id) 上唯一
_OPEN_ROW_CLAUSE = text("status NOT IN ('RESOLVED', 'CLOSED')")


class RiskIssue(Base, TimestampMixin):
    """风险/问题表模型

    风险升级为问题时直接修改 type 字段，不新建记录
    """
    __tablename__ = "risks_issues"
    __table_args__ = (
        Index(
            "uq_risks_issues_open_source",
            "source_kind",
            "source_entity_id",
            unique=True,
            sqlite_where=_OPEN_ROW_CLAUSE,
            postgresql_where=_OPEN_ROW_CLAUSE,
        ),
    )

    id = Column(String(25), primary_key=True, index=True, default=generate_risk_issue_id, comment='风险ID，格式：R + 雪花算法ID')
    project_id = Column(String(25), ForeignKey("projects.id"), nullable=False, index=True, comment='所属项目ID')
    type = Column(Enum(RiskType), nullable=False, comment='类型：风险/问题')
    title = Column(String(300), nullable=False, comment='标题')
    description = Column(Text, nullable=False, comment='描述')
    priority = Column(Enum(Priority), default=Priority.MEDIUM, comment='优先级')
    status = Column(Enum(RiskStatus), default=RiskStatus.OPEN, nullable=False, comment='状态')
    created_by_user_id = Column(String(25), ForeignKey("users.id"), nullable=True, comment='创建人ID，系统生成时为空')
    source_kind = Column(Enum(RiskSourceKind), nullable=True, comment='自动生成来源')
    source_entity_id = Column(String(25), nullable=True, comment='来源实体ID（项目或任务）')

    # 关系
    project = relationship("Project", back_populates="risks_issues")
