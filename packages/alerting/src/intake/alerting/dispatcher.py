"""NotificationDispatcher -- 后台通知任务队列

log_action 只负责入队，不等待投递。每个 worker 从 asyncio.Queue 取任务执行，
异常在此记录并计数，使通知失败可观测而不是静默丢弃。
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

Job = Callable[[], Awaitable[Any]]


class DispatchStats(BaseModel):
    """通知任务计数"""

    submitted: int = Field(default=0, ge=0, description="已入队")
    succeeded: int = Field(default=0, ge=0, description="执行成功")
    failed: int = Field(default=0, ge=0, description="执行失败（异常或返回 False）")
    dropped: int = Field(default=0, ge=0, description="队列已满被丢弃")


class NotificationDispatcher:
    """有界通知队列 + 固定数量 worker"""

    def __init__(self, workers: int = 2, queue_maxsize: int = 100) -> None:
        self._queue: asyncio.Queue[tuple[str, Job]] = asyncio.Queue(maxsize=queue_maxsize)
        self._worker_count = workers
        self._workers: list[asyncio.Task] = []
        self.stats = DispatchStats()

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        """启动 worker（重复调用无副作用）"""
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"notification-worker-{i}")
            for i in range(self._worker_count)
        ]
        log.info("notification_dispatcher_started", workers=self._worker_count)

    def submit(self, kind: str, job: Job) -> bool:
        """提交通知任务（不阻塞）

        Returns:
            False 表示队列已满，任务被丢弃
        """
        try:
            self._queue.put_nowait((kind, job))
        except asyncio.QueueFull:
            self.stats.dropped += 1
            log.warning("notification_dropped", kind=kind, queue_size=self._queue.qsize())
            return False
        self.stats.submitted += 1
        return True

    async def join(self) -> None:
        """等待队列中已提交的任务全部执行完"""
        await self._queue.join()

    async def stop(self, drain_timeout_s: float = 10.0) -> None:
        """尽量执行完剩余任务后停止 worker"""
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout_s)
        except TimeoutError:
            log.warning("notification_drain_timeout", pending=self._queue.qsize())

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        log.info("notification_dispatcher_stopped", **self.stats.model_dump())

    async def _worker(self, worker_id: int) -> None:
        while True:
            kind, job = await self._queue.get()
            try:
                result = await job()
            except Exception as e:
                self.stats.failed += 1
                log.error(
                    "notification_job_failed",
                    kind=kind,
                    worker_id=worker_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
            else:
                if result is False:
                    self.stats.failed += 1
                else:
                    self.stats.succeeded += 1
            finally:
                self._queue.task_done()
