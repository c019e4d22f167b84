#!/usr/bin/env python3
"""
项目启动脚本
"""
import logging

import uvicorn
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()

from config.logging_config import setup_logging  # noqa: E402
from config.settings import settings  # noqa: E402

logger = logging.getLogger(__name__)


def main():
    """启动FastAPI应用"""
    setup_logging()
    logger.info(f"启动服务器: http://{settings.SERVER_HOST}:{settings.SERVER_PORT}")
    logger.info(f"调试模式: {settings.DEBUG}")
    logger.info(f"API文档: http://{settings.SERVER_HOST}:{settings.SERVER_PORT}/docs")

    # 启动服务器
    uvicorn.run(
        "main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )


if __name__ == "__main__":
    main()
