import os

import uvicorn

from utils.snowflake import init_snowflake
from config.app_config import create_app, configure_routes
from config.exception_handlers import configure_exception_handlers
from config.middleware import configure_middleware
from config.settings import settings

# 多实例部署时通过 MACHINE_ID 区分雪花算法机器ID
init_snowflake(int(os.getenv("MACHINE_ID", "1")))

app = create_app()
configure_middleware(app)
configure_exception_handlers(app)
configure_routes(app)

if __name__ == "__main__":
    # 开发模式使用 import string 以支持 reload
    uvicorn.run(
        "main:app" if settings.DEBUG else app,
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
