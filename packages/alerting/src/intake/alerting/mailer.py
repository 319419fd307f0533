"""邮件传输 -- SMTP 实现与日志模式适配器

MailTransport 协议：send(sender, recipients, subject, html)。
smtp 模式通过 aiosmtplib（STARTTLS）投递；log 模式只记录日志，不访问网络。
"""

from email.message import EmailMessage
from typing import Protocol

import aiosmtplib
import structlog
from pydantic import BaseModel, Field

from .config import AlertingConfig
from .exceptions import MailDeliveryError

log = structlog.get_logger()


class OutgoingMail(BaseModel):
    """待发送邮件"""

    sender: str = Field(description="发件人")
    recipients: list[str] = Field(description="收件人")
    subject: str = Field(description="主题")
    html: str = Field(description="HTML 正文")


class MailTransport(Protocol):
    """邮件传输接口"""

    async def send(
        self,
        sender: str,
        recipients: list[str],
        subject: str,
        html: str,
    ) -> None:
        """发送邮件，失败时抛出异常"""
        ...


def build_message(mail: OutgoingMail) -> EmailMessage:
    """构建 MIME 邮件（纯文本降级 + HTML 正文）"""
    message = EmailMessage()
    message["From"] = mail.sender
    message["To"] = ", ".join(mail.recipients)
    message["Subject"] = mail.subject
    message.set_content("Este mensaje requiere un cliente de correo con soporte HTML.")
    message.add_alternative(mail.html, subtype="html")
    return message


class SmtpMailTransport:
    """SMTP 邮件传输（aiosmtplib，STARTTLS）"""

    def __init__(self, config: AlertingConfig) -> None:
        self._host = config.smtp_host
        self._port = config.smtp_port
        self._timeout_s = config.smtp_timeout_s
        self._username = config.email_user or None
        self._password = config.email_password.get_secret_value() or None

    async def send(
        self,
        sender: str,
        recipients: list[str],
        subject: str,
        html: str,
    ) -> None:
        """通过 SMTP 发送邮件

        Raises:
            MailDeliveryError: 连接、认证、投递或超时失败
        """
        message = build_message(
            OutgoingMail(sender=sender, recipients=recipients, subject=subject, html=html)
        )
        try:
            await aiosmtplib.send(
                message,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                start_tls=True,
                timeout=self._timeout_s,
            )
        except (aiosmtplib.SMTPException, OSError, TimeoutError) as e:
            raise MailDeliveryError(self._host, e) from e

        log.info(
            "mail_sent",
            subject=subject,
            recipient_count=len(recipients),
        )


class LogMailTransport:
    """日志模式邮件传输 -- 开发环境使用

    不访问网络，仅记录日志并保存已发送邮件供检查。
    """

    def __init__(self) -> None:
        self.sent: list[OutgoingMail] = []

    async def send(
        self,
        sender: str,
        recipients: list[str],
        subject: str,
        html: str,
    ) -> None:
        mail = OutgoingMail(sender=sender, recipients=recipients, subject=subject, html=html)
        self.sent.append(mail)
        log.info(
            "mail_logged",
            subject=subject,
            recipients=recipients,
            html_length=len(html),
        )


def create_mail_transport(config: AlertingConfig) -> MailTransport:
    """根据 mail_mode 创建邮件传输"""
    if config.mail_mode == "log":
        return LogMailTransport()
    return SmtpMailTransport(config)
