"""中间件配置模块"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from utils.logging_middleware import RequestResponseLoggingMiddleware


def configure_middleware(app: FastAPI) -> None:
    """配置应用中间件

    日志中间件最后添加，位于最外层，能记录到 CORS 预检请求
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        # 前端用请求ID对照服务端日志
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(RequestResponseLoggingMiddleware)
