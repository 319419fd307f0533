"""AlertingConfig -- 告警与周报配置加载

从环境变量加载配置，收件人、SMTP 服务器与周报时间槽都不硬编码在调用处。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError

log = structlog.get_logger()

# 收件人环境变量（按顺序合并，空值过滤，重复地址去重）
RECIPIENT_ENV_VARS: tuple[str, ...] = ("ADMIN_EMAIL", "ING_EMAIL", "TEC_EMAIL")


class ReportSchedule(BaseModel):
    """周报时间槽

    默认：周一 7:00 - 7:15（weekday 0 = 周一），两次周报间隔至少 20 小时。
    """

    weekday: int = Field(default=0, ge=0, le=6, description="星期几（0=周一）")
    hour: int = Field(default=7, ge=0, le=23, description="发送小时")
    window_minutes: int = Field(default=15, ge=1, le=60, description="发送窗口（分钟）")
    cooldown_hours: int = Field(default=20, ge=1, description="两次周报最小间隔（小时）")


class AlertingConfig(BaseModel):
    """告警包配置 -- 从环境变量加载

    环境变量:
        INTAKE_MAIL_MODE: 邮件模式（smtp/log）
        INTAKE_SMTP_HOST / INTAKE_SMTP_PORT: SMTP 服务器
        INTAKE_SMTP_TIMEOUT_S: SMTP 超时（秒，默认 30）
        EMAIL_USER / EMAIL_PASSWORD: 邮箱账号（同时作为发件人）
        ADMIN_EMAIL / ING_EMAIL / TEC_EMAIL: 收件人
        INTAKE_LOGO_PATH: 邮件 logo 图片
        INTAKE_REPORT_BRAND: 主题与页脚中的系统名称
        INTAKE_REPORT_WEEKDAY / _HOUR / _WINDOW_MINUTES / _COOLDOWN_HOURS: 周报时间槽
    """

    mail_mode: Literal["smtp", "log"] = Field(default="smtp", description="邮件模式")
    smtp_host: str = Field(default="smtp.office365.com", description="SMTP 服务器")
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP 端口（STARTTLS）")
    smtp_timeout_s: int = Field(default=30, ge=1, description="SMTP 超时（秒）")
    email_user: str = Field(default="", description="邮箱账号，同时作为发件人")
    email_password: SecretStr = Field(default=SecretStr(""), description="邮箱密码")
    recipients: list[str] = Field(default_factory=list, description="收件人（已去重、过滤空值）")
    logo_path: Path = Field(
        default=Path("public/images/logo.jpg"),
        description="邮件 logo 图片路径",
    )
    brand: str = Field(default="Onboarding", description="系统名称")
    schedule: ReportSchedule = Field(default_factory=ReportSchedule, description="周报时间槽")


def normalize_recipients(values: list[str | None]) -> list[str]:
    """过滤空值并去重（保持首次出现顺序）"""
    seen: dict[str, None] = {}
    for value in values:
        if value and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)


def _int_from_env(env_var: str, model: type[BaseModel], field: str) -> int | None:
    """读取整数环境变量

    非整数或超出字段取值范围时记录 invalid_int_config 告警并返回 None（使用默认值），
    配置错误不阻塞启动。
    """
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        value = int(val)
        model.model_validate({field: value})
    except (ValueError, ValidationError) as e:
        log.warning(
            "invalid_int_config",
            env_var=env_var,
            value=val,
            fallback=model.model_fields[field].default,
            error=str(e),
        )
        return None
    return value


def load_alerting_config() -> AlertingConfig:
    """从环境变量加载告警配置

    Returns:
        AlertingConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("INTAKE_MAIL_MODE"):
        kwargs["mail_mode"] = val

    if val := os.environ.get("INTAKE_SMTP_HOST"):
        kwargs["smtp_host"] = val

    if (port := _int_from_env("INTAKE_SMTP_PORT", AlertingConfig, "smtp_port")) is not None:
        kwargs["smtp_port"] = port

    timeout = _int_from_env("INTAKE_SMTP_TIMEOUT_S", AlertingConfig, "smtp_timeout_s")
    if timeout is not None:
        kwargs["smtp_timeout_s"] = timeout

    if val := os.environ.get("EMAIL_USER"):
        kwargs["email_user"] = val

    if val := os.environ.get("EMAIL_PASSWORD"):
        kwargs["email_password"] = SecretStr(val)

    kwargs["recipients"] = normalize_recipients(
        [os.environ.get(name) for name in RECIPIENT_ENV_VARS]
    )

    if val := os.environ.get("INTAKE_LOGO_PATH"):
        kwargs["logo_path"] = Path(val)

    if val := os.environ.get("INTAKE_REPORT_BRAND"):
        kwargs["brand"] = val

    schedule_kwargs: dict = {}
    for field, env_var in (
        ("weekday", "INTAKE_REPORT_WEEKDAY"),
        ("hour", "INTAKE_REPORT_HOUR"),
        ("window_minutes", "INTAKE_REPORT_WINDOW_MINUTES"),
        ("cooldown_hours", "INTAKE_REPORT_COOLDOWN_HOURS"),
    ):
        value = _int_from_env(env_var, ReportSchedule, field)
        if value is not None:
            schedule_kwargs[field] = value
    kwargs["schedule"] = ReportSchedule(**schedule_kwargs)

    return AlertingConfig(**kwargs)
