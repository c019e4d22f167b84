"""
请求日志中间件
记录每个API请求的方法、路径、状态码和耗时
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("api")

# 不记录的路径
EXCLUDED_PATHS = {"/health", "/favicon.ico", "/openapi.json"}


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """请求响应日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS or request.url.path.startswith("/docs"):
            return await call_next(request)

        # 生成请求ID用于追踪
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(f"[{request_id}] {request.method} {request.url.path} 客户端IP: {client_ip}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"[{request_id}] 请求处理异常: {str(e)}, 耗时: {process_time:.3f}s")
            raise

        process_time = time.time() - start_time
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"[{request_id}] 状态码: {response.status_code}, 耗时: {process_time:.3f}s")
        response.headers["X-Request-ID"] = request_id
        return response
