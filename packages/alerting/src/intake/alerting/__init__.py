"""Intake Alerting -- 事件记录门面、关键错误告警与周报

packages/alerting 的公开接口导出。
"""

# 组件
from .composer import ComposedMessage, compose_critical_alert, compose_weekly_digest

# 配置
from .config import AlertingConfig, ReportSchedule, load_alerting_config
from .dispatcher import DispatchStats, NotificationDispatcher

# 异常
from .exceptions import AlertingError, MailDeliveryError, NoRecipientsError

# 门面
from .facade import ActionLogger, create_action_logger
from .gate import WeeklyReportGate, WeeklyReportState
from .mailer import LogMailTransport, MailTransport, SmtpMailTransport, create_mail_transport
from .notifier import Notifier

__all__ = [
    "ActionLogger",
    "create_action_logger",
    "Notifier",
    "NotificationDispatcher",
    "DispatchStats",
    "WeeklyReportGate",
    "WeeklyReportState",
    "ComposedMessage",
    "compose_critical_alert",
    "compose_weekly_digest",
    "MailTransport",
    "SmtpMailTransport",
    "LogMailTransport",
    "create_mail_transport",
    "AlertingConfig",
    "ReportSchedule",
    "load_alerting_config",
    "AlertingError",
    "MailDeliveryError",
    "NoRecipientsError",
]
