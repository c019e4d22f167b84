"""异常处理器配置模块

配置全局异常处理器，所有错误统一返回 {code, message, data, timestamp}
"""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.exceptions import BusinessException
from utils.response_utils import format_timestamp
from utils.status_codes import INTERNAL_ERROR, UNPROCESSABLE_ENTITY, code_for_http_status

logger = logging.getLogger(__name__)


def _error_content(code: str, message, data=None) -> dict:
    return {
        "code": code,
        "message": message,
        "data": data,
        "timestamp": format_timestamp()
    }


def configure_exception_handlers(app: FastAPI) -> None:
    """配置全局异常处理器"""

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request, exc: BusinessException):
        """业务异常处理器"""
        logger.info(f"业务异常 {request.method} {request.url.path}: [{exc.code}] {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(exc.code, exc.message, exc.data)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException):
        """HTTP异常处理器"""
        detail = exc.detail
        if isinstance(detail, dict):
            # 如果detail是字典，可能包含自定义的错误信息
            message = detail.get("message", str(detail))
            data = detail.get("data")
        else:
            message = str(detail)
            data = None

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(code_for_http_status(exc.status_code), message, data),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc: RequestValidationError):
        """请求参数校验异常处理器"""
        errors = [
            {"field": ".".join(str(loc) for loc in error.get("loc", [])), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=_error_content(UNPROCESSABLE_ENTITY, "请求参数校验失败", errors)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception):
        """通用异常处理器"""
        logger.error(f"未处理的异常 {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_content(INTERNAL_ERROR, "服务器内部错误")
        )
