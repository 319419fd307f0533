"""全局 pytest 配置 -- 固定时区、可控时钟与临时日志目录 fixture"""

from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest


class FakeClock:
    """可手动推进的时钟（作为 clock 注入）"""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def tz() -> ZoneInfo:
    """事件时区"""
    return ZoneInfo("America/Mexico_City")


@pytest.fixture
def tuesday_noon(tz: ZoneInfo) -> datetime:
    """周报时间槽之外的时间点（2026-10-20 周二 12:00）"""
    return datetime(2026, 10, 20, 12, 0, 0, tzinfo=tz)


@pytest.fixture
def monday_report_slot(tz: ZoneInfo) -> datetime:
    """周报时间槽内的时间点（2026-10-19 周一 07:05）"""
    return datetime(2026, 10, 19, 7, 5, 0, tzinfo=tz)


@pytest.fixture
def clock(tuesday_noon: datetime) -> FakeClock:
    """默认停在周二中午的可控时钟"""
    return FakeClock(tuesday_noon)


@pytest.fixture
def tmp_log_dir(tmp_path: Path) -> Path:
    """临时日志目录（不预先创建，由存储自行创建）"""
    return tmp_path / "logs"
