from datetime import datetime
from math import ceil
from typing import Any, List, Optional

from pydantic import BaseModel

from .status_codes import SUCCESS, get_message


def format_timestamp(dt: Optional[datetime] = None) -> str:
    """
    格式化时间戳为标准格式

    参数:
        dt: datetime对象，如果为None则使用当前时间

    返回:
        格式化后的时间字符串，格式为 "YYYY-MM-DD HH:MM:SS"
    """
    if dt is None:
        dt = datetime.now()
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _serialize(data: Any) -> Any:
    """将Pydantic模型递归转换为可JSON序列化的结构"""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, dict):
        return {key: _serialize(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return data


def standard_response(data: Any = None, code: str = SUCCESS, message: Optional[str] = None):
    """
    生成标准响应格式

    参数:
        data: 响应数据
        code: 业务状态码
        message: 响应消息，如果为None则使用状态码对应的默认消息

    返回:
        标准格式的响应字典
    """
    if message is None:
        message = get_message(code)

    return {
        "code": code,
        "message": message,
        "data": _serialize(data),
        "timestamp": format_timestamp()
    }


def list_response(records: List[Any], total: Optional[int] = None, page: int = 1, size: int = 10, message: Optional[str] = None, code: str = SUCCESS):
    """
    生成列表数据的标准响应

    参数:
        records: 列表数据项
        total: 总记录数，如果为None则使用records的长度
        page: 当前页码
        size: 每页大小
        message: 响应消息
        code: 业务状态码
    """
    if total is None:
        total = len(records)

    data = {
        "records": records,
        "total": total,
        "page": page,
        "size": size,
        "totalPages": ceil(total / size) if size > 0 else 0
    }

    return standard_response(data=data, code=code, message=message)


def paginate_query(query, page: int = 1, size: int = 10):
    """
    对查询进行分页处理

    返回:
        (总记录数, 分页后的记录列表)
    """
    total = query.count()
    data = query.offset((page - 1) * size).limit(size).all()

    return total, data
