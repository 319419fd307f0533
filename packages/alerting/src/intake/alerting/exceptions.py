"""告警异常体系

通知路径上的异常只在 Notifier / Dispatcher 内部流转，不会传播到 log_action 的调用方。
"""


class AlertingError(Exception):
    """告警包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过稍后重发恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class MailDeliveryError(AlertingError):
    """邮件投递失败（连接失败、认证失败、超时、收件人被拒等）"""

    def __init__(self, host: str, original_error: Exception) -> None:
        """
        Args:
            host: 尝试连接的 SMTP 服务器
            original_error: 原始异常
        """
        super().__init__(
            f"邮件投递失败: {host} -- {original_error}",
            recoverable=True,
        )
        self.host = host
        self.original_error = original_error


class NoRecipientsError(AlertingError):
    """未配置任何收件人"""

    def __init__(self) -> None:
        super().__init__("未配置收件人（ADMIN_EMAIL / ING_EMAIL / TEC_EMAIL）", recoverable=False)
