"""统一异常处理模块

定义系统中使用的自定义异常类
"""
from typing import Any

from utils.status_codes import (
    BUSINESS_ERROR, VALIDATION_ERROR, PERMISSION_ERROR, RESOURCE_ERROR, CONFLICT, WORKFLOW_ERROR
)


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(self, code: str = BUSINESS_ERROR, message: str = "业务处理失败", data: Any = None, status_code: int = 400):
        self.code = code
        self.message = message
        self.data = data
        self.status_code = status_code
        super().__init__(message)


class ValidationException(BusinessException):
    """数据验证异常"""

    def __init__(self, message: str, data: Any = None):
        super().__init__(
            code=VALIDATION_ERROR,
            message=message,
            data=data,
            status_code=400
        )


class PermissionException(BusinessException):
    """权限异常"""

    def __init__(self, message: str = "权限不足", data: Any = None):
        super().__init__(
            code=PERMISSION_ERROR,
            message=message,
            data=data,
            status_code=403
        )


class ResourceNotFoundException(BusinessException):
    """资源不存在异常"""

    def __init__(self, message: str = "资源不存在", data: Any = None, code: str = RESOURCE_ERROR):
        super().__init__(
            code=code,
            message=message,
            data=data,
            status_code=404
        )


class ResourceConflictException(BusinessException):
    """资源冲突异常"""

    def __init__(self, message: str = "资源冲突", data: Any = None):
        super().__init__(
            code=CONFLICT,
            message=message,
            data=data,
            status_code=409
        )


class WorkflowStateException(BusinessException):
    """审批流程状态异常，例如审批非待审批状态的项目"""

    def __init__(self, message: str, data: Any = None):
        super().__init__(
            code=WORKFLOW_ERROR,
            message=message,
            data=data,
            status_code=409
        )
