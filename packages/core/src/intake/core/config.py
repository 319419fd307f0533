"""配置常量模块 -- 可通过环境变量覆盖

包含事件日志目录、时区、分类配置文件路径、周报状态文件路径等可配置项。
"""

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

# 日志文件名（位于日志目录下，一行一个 JSON 事件）
LOG_FILE_NAME: str = "application.log"

# 默认时区：所有事件时间戳与报表日期固定在此时区，与服务器本地时区无关
DEFAULT_TIMEZONE: str = "America/Mexico_City"

# 周统计窗口（天）
STATS_WINDOW_DAYS: int = 7


def get_log_dir() -> Path:
    """获取事件日志目录"""
    return Path(os.environ.get("INTAKE_LOG_DIR", "logs"))


def get_log_path() -> Path:
    """获取事件日志文件路径"""
    return get_log_dir() / LOG_FILE_NAME


def get_timezone() -> ZoneInfo:
    """获取事件时区"""
    return ZoneInfo(os.environ.get("INTAKE_TIMEZONE", DEFAULT_TIMEZONE))


def get_classification_file() -> Path | None:
    """获取分类配置文件路径，未设置时返回 None（使用内置默认值）"""
    value = os.environ.get("INTAKE_CLASSIFICATION_FILE")
    return Path(value) if value else None


def get_report_state_file() -> Path | None:
    """获取周报状态文件路径，未设置时返回 None（仅内存保存）"""
    value = os.environ.get("INTAKE_REPORT_STATE_FILE")
    return Path(value) if value else None


def now_in(tz: ZoneInfo) -> datetime:
    """当前时间（指定时区，毫秒精度）

    日志行只保存到毫秒，截断后写入与读回的时间戳完全一致。
    """
    now = datetime.now(tz)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)
