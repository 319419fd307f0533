"""周报发送闸门 -- 时间槽判断 + 冷却期去重

WeeklyReportState 保存最近一次成功发送周报的时间，默认仅在内存中（重启后丢失）；
配置 state_path 时启动加载、每次成功发送后写回文件。

try_acquire() 在单个事件循环线程内同步完成"检查 + 标记发送中"，中间没有 await，
因此两个几乎同时的 log_action 不会都通过闸门。
"""

import json
from datetime import datetime, timedelta
from pathlib import Path

import structlog

from .config import ReportSchedule

log = structlog.get_logger()


class WeeklyReportState:
    """最近一次成功发送周报的时间"""

    def __init__(self, state_path: Path | None = None) -> None:
        self._state_path = state_path
        self.last_sent: datetime | None = None
        if state_path is not None:
            self.last_sent = self._load(state_path)

    def record_sent(self, at: datetime) -> None:
        """记录成功发送时间（配置了 state_path 时写回文件）"""
        self.last_sent = at
        if self._state_path is None:
            return
        try:
            self._state_path.parent.mkdir(parents=True, exist_ok=True)
            self._state_path.write_text(
                json.dumps({"last_weekly_report": at.isoformat()}),
                encoding="utf-8",
            )
        except OSError as e:
            # 状态文件写失败只影响重启后的去重，内存状态仍然有效
            log.warning("report_state_save_failed", path=str(self._state_path), error=str(e))

    @staticmethod
    def _load(path: Path) -> datetime | None:
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return datetime.fromisoformat(raw["last_weekly_report"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.warning("report_state_load_failed", path=str(path), error=str(e))
            return None


class WeeklyReportGate:
    """周报闸门"""

    def __init__(self, schedule: ReportSchedule, state: WeeklyReportState) -> None:
        self._schedule = schedule
        self._state = state
        self._in_flight = False

    @property
    def state(self) -> WeeklyReportState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def in_window(self, now: datetime) -> bool:
        """now 是否落在周报时间槽内（例如周一 7:00 - 7:14）"""
        return (
            now.weekday() == self._schedule.weekday
            and now.hour == self._schedule.hour
            and now.minute < self._schedule.window_minutes
        )

    def cooled_down(self, now: datetime) -> bool:
        """距上次成功发送是否已超过冷却期（从未发送视为已冷却）"""
        last_sent = self._state.last_sent
        if last_sent is None:
            return True
        return now - last_sent > timedelta(hours=self._schedule.cooldown_hours)

    def try_acquire(self, now: datetime) -> bool:
        """检查是否应发送周报，通过时标记为发送中"""
        if self._in_flight or not self.in_window(now) or not self.cooled_down(now):
            return False
        self._in_flight = True
        return True

    def mark_sent(self, at: datetime) -> None:
        """发送成功：更新状态并释放闸门"""
        self._state.record_sent(at)
        self._in_flight = False

    def release(self) -> None:
        """发送失败：仅释放闸门，状态不变（窗口内的下一次调用可重试）"""
        self._in_flight = False
