"""周统计聚合 -- 从事件日志全量扫描计算统计

每次调用都完整扫描日志（O(日志大小)）。周报频率下可以接受；
日志量显著增长时应改为按代码维护的滚动窗口计数。
"""

import time
from collections.abc import Iterable
from datetime import datetime, timedelta

import structlog

from .classification import EventClassifier
from .config import STATS_WINDOW_DAYS
from .models.event import Event
from .models.statistics import ErrorTypeSummary, WeeklyStatistics
from .store.log_store import JsonLineLogStore

log = structlog.get_logger()

# 错误事件缺少描述时使用的代表性描述
MISSING_DESCRIPTION = "Sin descripción"


def apply_event(stats: WeeklyStatistics, event: Event, classifier: EventClassifier) -> None:
    """将单个窗口内事件计入统计（就地修改）"""
    code = event.code

    if classifier.is_request(code):
        stats.total_requests += 1

    if classifier.is_survey_success(code):
        stats.successful_surveys += 1

    if classifier.is_error(code):
        summary = stats.errors_by_type.get(code)
        if summary is None:
            summary = ErrorTypeSummary(description=event.description or MISSING_DESCRIPTION)
            stats.errors_by_type[code] = summary
        summary.count += 1

        if classifier.is_critical(code):
            stats.errors.critical += 1
        else:
            stats.errors.normal += 1

        if classifier.is_failed_survey(code):
            stats.failed_surveys += 1

    user_id = classifier.user_id(event.data)
    if user_id is not None:
        stats.unique_users.add(user_id)


def compute_weekly_statistics(
    events: Iterable[Event],
    classifier: EventClassifier,
    now: datetime,
    window: timedelta = timedelta(days=STATS_WINDOW_DAYS),
) -> WeeklyStatistics:
    """计算 [now - window, now] 窗口内的统计（两端都包含）

    Args:
        events: 事件序列（通常来自日志全量扫描）
        classifier: 事件分类器
        now: 窗口终点，必须带时区
        window: 窗口长度，默认 7 天

    Returns:
        WeeklyStatistics
    """
    start = now - window
    stats = WeeklyStatistics(period_start=start, period_end=now)

    for event in events:
        if start <= event.timestamp <= now:
            apply_event(stats, event, classifier)

    return stats


class StatisticsAggregator:
    """基于日志存储的周统计聚合器"""

    def __init__(self, store: JsonLineLogStore, classifier: EventClassifier) -> None:
        self._store = store
        self._classifier = classifier

    def compute(self, now: datetime) -> WeeklyStatistics:
        """全量扫描日志并计算周统计"""
        start_time = time.monotonic()
        stats = compute_weekly_statistics(
            self._store.iter_events(),
            self._classifier,
            now,
        )
        log.info(
            "weekly_statistics_computed",
            total_requests=stats.total_requests,
            error_codes=len(stats.errors_by_type),
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )
        return stats
