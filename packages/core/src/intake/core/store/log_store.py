"""JSON Lines 事件日志 -- append-only 文件存储

只允许追加写入，不允许更新、删除或重排。
假设单进程独占日志文件；多进程共享同一文件需要外部追加锁。
append 是同步调用（open + write + fsync），在 async 请求路径上会占用事件循环线程；
事件量为每请求一条量级时可接受，换取 log_action 返回时记录已落盘。
"""

import os
from collections.abc import Iterator
from pathlib import Path

import structlog

from ..models.event import Event

log = structlog.get_logger()


class JsonLineLogStore:
    """事件日志的 JSON Lines 实现"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        # 首次访问时确保日志目录存在
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: Event) -> None:
        """追加一条事件（append-only）

        写入、flush 并 fsync 后返回；同时向控制台输出可读日志。
        写入失败不在此层捕获，直接向调用方抛出。
        """
        line = event.to_record() + "\n"
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())

        log.info(
            "action_logged",
            timestamp=event.timestamp.isoformat(timespec="milliseconds"),
            code=event.code,
            origin=event.origin,
            description=event.description,
        )

    def iter_events(self) -> Iterator[Event]:
        """按追加顺序（旧 -> 新）惰性读取事件

        无法解析的行记录告警后跳过，不中断读取。文件不存在时不产生任何事件。
        """
        if not self._path.exists():
            return

        with self._path.open("r", encoding="utf-8", errors="replace") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield Event.from_record(line)
                except ValueError as e:
                    log.warning(
                        "log_line_parse_failed",
                        path=str(self._path),
                        line_no=line_no,
                        error=str(e),
                    )

    def read_all(self) -> list[Event]:
        """读取全部事件"""
        return list(self.iter_events())
