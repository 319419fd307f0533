"""packages/alerting 测试 fixtures"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from intake.alerting import (
    ActionLogger,
    AlertingConfig,
    LogMailTransport,
    create_action_logger,
)


@pytest.fixture
def alerting_config(tmp_path: Path) -> AlertingConfig:
    """带收件人的告警配置（logo 文件不存在，使用占位）"""
    return AlertingConfig(
        mail_mode="log",
        email_user="alerts@example.com",
        recipients=["admin@example.com", "ops@example.com"],
        logo_path=tmp_path / "missing-logo.jpg",
        brand="Onboarding Test",
    )


@pytest.fixture
def mail_transport() -> LogMailTransport:
    """记录已发送邮件的传输"""
    return LogMailTransport()


@pytest_asyncio.fixture
async def action_logger(
    tmp_log_dir, tz, alerting_config, mail_transport, clock
) -> AsyncGenerator[ActionLogger, None]:
    """已启动通知队列的 ActionLogger"""
    logger = create_action_logger(
        log_dir=tmp_log_dir,
        tz=tz,
        alerting_config=alerting_config,
        transport=mail_transport,
        clock=clock,
    )
    await logger.dispatcher.start()
    yield logger
    await logger.dispatcher.stop()
