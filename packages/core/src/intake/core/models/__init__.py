"""Intake Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .event import Event
from .statistics import ErrorCounts, ErrorTypeSummary, WeeklyStatistics

__all__ = [
    # Event
    "Event",
    # Statistics
    "WeeklyStatistics",
    "ErrorCounts",
    "ErrorTypeSummary",
]
