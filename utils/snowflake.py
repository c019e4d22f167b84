"""
雪花算法实现
用于生成分布式唯一ID

雪花算法ID结构（64位）：
- 1位符号位（固定为0）
- 41位时间戳（毫秒级，可使用69年）
- 10位机器ID（支持1024台机器）
- 12位序列号（每毫秒可生成4096个ID）

业务ID格式：实体前缀 + 雪花算法ID，例如 P1234567890
"""

import time
import threading
from typing import Optional


class SnowflakeGenerator:
    """雪花算法ID生成器"""

    # 时间戳起始点（2024-01-01 00:00:00 UTC）
    EPOCH = 1704067200000  # 毫秒时间戳

    # 各部分位数
    MACHINE_ID_BITS = 10
    SEQUENCE_BITS = 12

    # 最大值
    MAX_MACHINE_ID = (1 << MACHINE_ID_BITS) - 1  # 1023
    MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1      # 4095

    # 位移量
    MACHINE_ID_SHIFT = SEQUENCE_BITS
    TIMESTAMP_SHIFT = MACHINE_ID_BITS + SEQUENCE_BITS

    def __init__(self, machine_id: int = 1):
        """
        初始化雪花算法生成器

        Args:
            machine_id: 机器ID，范围0-1023
        """
        if machine_id < 0 or machine_id > self.MAX_MACHINE_ID:
            raise ValueError(f"机器ID必须在0-{self.MAX_MACHINE_ID}之间")

        self.machine_id = machine_id
        self.sequence = 0
        self.last_timestamp = -1
        self.lock = threading.Lock()

    def _current_timestamp(self) -> int:
        """获取当前毫秒时间戳"""
        return int(time.time() * 1000)

    def _wait_next_millis(self, last_timestamp: int) -> int:
        """等待下一毫秒"""
        timestamp = self._current_timestamp()
        while timestamp <= last_timestamp:
            timestamp = self._current_timestamp()
        return timestamp

    def generate_id(self) -> int:
        """
        生成雪花算法ID

        Returns:
            int: 64位唯一ID
        """
        with self.lock:
            timestamp = self._current_timestamp()

            # 时钟回拨检查
            if timestamp < self.last_timestamp:
                raise RuntimeError(f"时钟回拨，拒绝生成ID。当前时间戳: {timestamp}, 上次时间戳: {self.last_timestamp}")

            if timestamp == self.last_timestamp:
                self.sequence = (self.sequence + 1) & self.MAX_SEQUENCE
                # 序列号溢出，等待下一毫秒
                if self.sequence == 0:
                    timestamp = self._wait_next_millis(self.last_timestamp)
            else:
                self.sequence = 0

            self.last_timestamp = timestamp

            return (
                ((timestamp - self.EPOCH) << self.TIMESTAMP_SHIFT) |
                (self.machine_id << self.MACHINE_ID_SHIFT) |
                self.sequence
            )


# 全局雪花算法生成器实例
_snowflake_generator: Optional[SnowflakeGenerator] = None


def init_snowflake(machine_id: int = 1):
    """
    初始化全局雪花算法生成器

    Args:
        machine_id: 机器ID，范围0-1023
    """
    global _snowflake_generator
    _snowflake_generator = SnowflakeGenerator(machine_id)


def generate_snowflake_id() -> int:
    """生成雪花算法ID"""
    if _snowflake_generator is None:
        init_snowflake()
    return _snowflake_generator.generate_id()


def _prefixed(prefix: str) -> str:
    return f"{prefix}{generate_snowflake_id()}"


# 各实体ID生成函数（用作SQLAlchemy列默认值）
def generate_user_id() -> str:
    return _prefixed("U")


def generate_department_id() -> str:
    return _prefixed("D")


def generate_project_id() -> str:
    return _prefixed("P")


def generate_task_id() -> str:
    return _prefixed("T")


def generate_milestone_id() -> str:
    return _prefixed("M")


def generate_task_milestone_id() -> str:
    return _prefixed("TM")


def generate_risk_issue_id() -> str:
    return _prefixed("R")


def generate_notification_id() -> str:
    return _prefixed("N")


def generate_weekly_update_id() -> str:
    return _prefixed("W")
