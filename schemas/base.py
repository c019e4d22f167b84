from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationInfo


def default_timestamp() -> str:
    """返回格式化的当前时间戳"""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def parse_datetime_value(v):
    """解析日期时间字符串，支持多种格式"""
    if not v:
        return v
    if isinstance(v, str):
        try:
            # "YYYY-MM-DD HH:MM:SS" 格式
            if len(v) == 19 and ' ' in v:
                return datetime.strptime(v, "%Y-%m-%d %H:%M:%S")
            # "YYYY-MM-DD" 格式
            elif len(v) == 10:
                return datetime.strptime(v, "%Y-%m-%d")
            # ISO 格式，统一转换为不带时区的时间
            parsed = datetime.fromisoformat(v.replace('Z', '+00:00'))
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone().replace(tzinfo=None)
            return parsed
        except ValueError:
            # 如果解析失败，返回原值让 Pydantic 处理
            return v
    return v


def reject_none(v, info: ValidationInfo):
    """更新请求中显式传入 null 的非空字段直接校验失败"""
    if v is None:
        raise ValueError(f"{info.field_name} 不能为空")
    return v


# 基础响应模式
class BaseResponse(BaseModel):
    """基础响应模式"""
    code: str = "200"
    message: str = "操作成功"
    data: Optional[Any] = None
    timestamp: str = Field(default_factory=default_timestamp)

    class Config:
        from_attributes = True


# 分页响应模式
class PaginationResponse(BaseModel):
    """分页响应模式"""
    total: int = Field(..., description="总记录数")
    page: int = Field(..., description="当前页码")
    size: int = Field(..., description="每页数量")
    totalPages: int = Field(..., description="总页数")
    records: List[Any] = Field(..., description="数据列表")
