"""日志配置模块

统一配置根日志记录器：控制台、轮转文件和敏感信息过滤
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings


class ColoredFormatter(logging.Formatter):
    """带颜色的控制台日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',      # 青色
        'INFO': '\033[32m',       # 绿色
        'WARNING': '\033[33m',    # 黄色
        'ERROR': '\033[31m',      # 红色
        'CRITICAL': '\033[35m',   # 紫色
        'RESET': '\033[0m'        # 重置
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        record.asctime = self.formatTime(record, self.datefmt)

        log_message = (
            f"{color}[{record.asctime}] "
            f"{record.levelname:8} "
            f"{record.name}:{record.lineno} - "
            f"{record.getMessage()}{reset}"
        )

        if record.exc_info:
            log_message += "\n" + self.formatException(record.exc_info)

        return log_message


class SensitiveDataFilter(logging.Filter):
    """敏感数据过滤器"""

    SENSITIVE_FIELDS = ['password', 'secret', 'authorization', 'api_key']

    def filter(self, record: logging.LogRecord) -> bool:
        message = str(record.msg)
        lowered = message.lower()
        for field in self.SENSITIVE_FIELDS:
            if f"{field}=" in lowered:
                start = lowered.index(f"{field}=") + len(field) + 1
                end = start
                while end < len(message) and not message[end].isspace():
                    end += 1
                message = message[:start] + "***MASKED***" + message[end:]
                lowered = message.lower()
        record.msg = message
        return True


PLAIN_FORMAT = '[%(asctime)s] %(levelname)-8s %(name)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_colors: Optional[bool] = None
) -> None:
    """设置日志配置"""
    log_level = (log_level or settings.LOG_LEVEL).upper()
    log_file = log_file or settings.LOG_FILE
    if enable_colors is None:
        enable_colors = settings.LOG_ENABLE_COLORS

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # 清除现有的处理器，避免重复日志
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if enable_colors and sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=settings.LOG_MAX_SIZE,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        file_handler.addFilter(SensitiveDataFilter())
        root_logger.addHandler(file_handler)

    # 设置第三方库的日志级别
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DATABASE_ECHO else logging.WARNING
    )
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
