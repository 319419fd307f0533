"""Intake Core Store -- 事件日志持久化实现

提供工厂函数创建 append-only 的 JSON Lines 日志存储。
"""

from pathlib import Path

from ..config import LOG_FILE_NAME
from .log_store import JsonLineLogStore


def create_log_store(log_dir: str | Path) -> JsonLineLogStore:
    """创建事件日志存储

    Args:
        log_dir: 日志目录（不存在时自动创建）

    Returns:
        JsonLineLogStore 实例
    """
    return JsonLineLogStore(Path(log_dir) / LOG_FILE_NAME)


__all__ = [
    "JsonLineLogStore",
    "create_log_store",
]
