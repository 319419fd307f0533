"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from intake.core.classification import EventClassifier
from intake.core.models import Event
from intake.core.store import JsonLineLogStore, create_log_store


@pytest.fixture
def core_store(tmp_log_dir: Path) -> JsonLineLogStore:
    """核心层临时日志存储"""
    return create_log_store(tmp_log_dir)


@pytest.fixture
def classifier() -> EventClassifier:
    """使用内置默认集合的分类器"""
    return EventClassifier()


@pytest.fixture
def make_event(tuesday_noon: datetime) -> Callable[..., Event]:
    """事件工厂：默认时间为周二中午"""

    def _make(
        code: str,
        timestamp: datetime | None = None,
        description: str = "desc",
        origin: str = "test:origin",
        data: dict[str, Any] | None = None,
    ) -> Event:
        return Event(
            timestamp=timestamp or tuesday_noon,
            code=code,
            description=description,
            origin=origin,
            data=data or {},
        )

    return _make
