"""ActionLogger -- 事件记录统一入口

log_action 流程：
1. 取当前时间（固定时区）
2. 构建 Event 并追加到日志（持久化 + 控制台输出），存储异常直接抛出
3. 关键错误：向 dispatcher 提交一次告警任务
4. 周报闸门通过：提交周报任务，成功后更新 WeeklyReportState
告警与周报只入队不等待，log_action 返回时不保证已投递。
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import structlog

from intake.core.classification import ClassificationConfig, EventClassifier
from intake.core.config import now_in
from intake.core.models import Event
from intake.core.statistics import StatisticsAggregator
from intake.core.store import JsonLineLogStore, create_log_store

from .config import AlertingConfig
from .dispatcher import NotificationDispatcher
from .gate import WeeklyReportGate, WeeklyReportState
from .mailer import MailTransport, create_mail_transport
from .notifier import Notifier

log = structlog.get_logger()


class ActionLogger:
    """事件记录门面"""

    def __init__(
        self,
        store: JsonLineLogStore,
        classifier: EventClassifier,
        notifier: Notifier,
        dispatcher: NotificationDispatcher,
        gate: WeeklyReportGate,
        clock: Callable[[], datetime],
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.gate = gate
        self._clock = clock

    def log_action(
        self,
        code: str,
        description: str,
        origin: str,
        data: dict[str, Any] | None = None,
    ) -> Event:
        """记录一条事件

        Args:
            code: 事件代码（INFO_* / ERR_* / WARN_*）
            description: 描述
            origin: 调用点（component:operation）
            data: 附加数据

        Returns:
            已写入的 Event

        Raises:
            OSError: 日志写入失败（通知路径的失败不会抛出）
        """
        now = self._clock()
        event = Event(
            timestamp=now,
            code=code,
            description=description,
            origin=origin,
            data=data or {},
        )
        self.store.append(event)

        if self.classifier.is_critical(code):
            self.dispatcher.submit(
                "critical_alert",
                lambda: self.notifier.send_critical_alert(event),
            )

        if self.gate.try_acquire(now):
            log.info("weekly_report_triggered", trigger_code=code)
            if not self.dispatcher.submit("weekly_report", lambda: self._run_weekly_report(now)):
                self.gate.release()

        return event

    async def _run_weekly_report(self, now: datetime) -> bool:
        try:
            sent = await self.notifier.send_weekly_report(now)
        except Exception:
            self.gate.release()
            raise
        if sent:
            self.gate.mark_sent(self._clock())
        else:
            self.gate.release()
        return sent


def create_action_logger(
    log_dir: str | Path,
    tz: ZoneInfo,
    alerting_config: AlertingConfig,
    classification: ClassificationConfig | None = None,
    transport: MailTransport | None = None,
    state_path: Path | None = None,
    clock: Callable[[], datetime] | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> ActionLogger:
    """组装 ActionLogger 及其依赖

    Args:
        log_dir: 事件日志目录
        tz: 事件与报表时区
        alerting_config: 告警配置
        classification: 分类配置（默认内置集合）
        transport: 邮件传输（默认按 mail_mode 创建）
        state_path: 周报状态文件（None 表示仅内存）
        clock: 当前时间来源（默认 tz 下的毫秒精度当前时间）
        dispatcher: 通知队列（默认 2 个 worker）

    Returns:
        ActionLogger 实例（dispatcher 尚未启动）
    """
    effective_clock = clock or (lambda: now_in(tz))
    store = create_log_store(log_dir)
    classifier = EventClassifier(classification)
    notifier = Notifier(
        transport=transport or create_mail_transport(alerting_config),
        config=alerting_config,
        aggregator=StatisticsAggregator(store, classifier),
        tz=tz,
        clock=effective_clock,
    )
    gate = WeeklyReportGate(alerting_config.schedule, WeeklyReportState(state_path))
    return ActionLogger(
        store=store,
        classifier=classifier,
        notifier=notifier,
        dispatcher=dispatcher or NotificationDispatcher(),
        gate=gate,
        clock=effective_clock,
    )
