"""Notifier -- 关键错误告警与周报发送

尽力而为：任何失败（logo、渲染、统计读取、邮件投递）都在此捕获并记录，
以 False 返回，不向调用方传播。告警失败不能拖垮它所监控的日志路径。
不做重试。
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

import structlog

from intake.core.models import Event, WeeklyStatistics
from intake.core.statistics import StatisticsAggregator

from .composer import (
    ComposedMessage,
    compose_critical_alert,
    compose_weekly_digest,
    load_logo_html,
)
from .config import AlertingConfig
from .exceptions import NoRecipientsError
from .mailer import MailTransport

log = structlog.get_logger()


class Notifier:
    """邮件通知服务"""

    def __init__(
        self,
        transport: MailTransport,
        config: AlertingConfig,
        aggregator: StatisticsAggregator,
        tz: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            transport: 邮件传输
            config: 告警配置（发件人、收件人、logo、系统名称）
            aggregator: 周统计聚合器
            tz: 报表时区
            clock: 当前时间来源（测试可注入）
        """
        self._transport = transport
        self._config = config
        self._aggregator = aggregator
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(tz))

    @property
    def recipients(self) -> list[str]:
        return list(self._config.recipients)

    async def send_critical_alert(self, event: Event) -> bool:
        """发送关键错误告警

        Returns:
            True 表示投递成功；失败已记录日志
        """
        try:
            message = compose_critical_alert(
                event,
                load_logo_html(self._config.logo_path),
                self._config.brand,
                self._tz,
            )
            await self._deliver(message)
        except Exception as e:
            log.error(
                "critical_alert_send_failed",
                code=event.code,
                origin=event.origin,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        log.info("critical_alert_sent", code=event.code, origin=event.origin)
        return True

    async def send_weekly_digest(self, statistics: WeeklyStatistics) -> bool:
        """发送周报（使用已计算好的统计）

        Returns:
            True 表示投递成功；失败已记录日志
        """
        try:
            message = compose_weekly_digest(
                statistics,
                load_logo_html(self._config.logo_path),
                self._config.brand,
                self._clock(),
                self._tz,
            )
            await self._deliver(message)
        except Exception as e:
            log.error(
                "weekly_report_send_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        log.info(
            "weekly_report_sent",
            period_start=statistics.period_start.isoformat(),
            period_end=statistics.period_end.isoformat(),
        )
        return True

    async def send_weekly_report(self, now: datetime) -> bool:
        """重新计算 [now - 7d, now] 统计并发送周报

        全量扫描日志在工作线程中执行，不阻塞事件循环。
        """
        try:
            statistics = await asyncio.to_thread(self._aggregator.compute, now)
        except Exception as e:
            log.error(
                "weekly_report_send_failed",
                stage="statistics",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False
        return await self.send_weekly_digest(statistics)

    async def _deliver(self, message: ComposedMessage) -> None:
        recipients = self.recipients
        if not recipients:
            raise NoRecipientsError()
        await self._transport.send(
            self._config.email_user,
            recipients,
            message.subject,
            message.html,
        )
