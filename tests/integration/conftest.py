"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from intake.alerting import AlertingConfig, LogMailTransport, create_action_logger


@pytest_asyncio.fixture
async def outbox() -> LogMailTransport:
    """记录全部外发邮件"""
    return LogMailTransport()


@pytest_asyncio.fixture
async def integration_app(tmp_log_dir, tmp_path, tz, clock, outbox):
    """集成测试用 FastAPI app（周报状态写入文件）"""
    from intake.gateway.main import create_app

    app = create_app()
    action_logger = create_action_logger(
        log_dir=tmp_log_dir,
        tz=tz,
        alerting_config=AlertingConfig(
            mail_mode="log",
            email_user="alerts@example.com",
            recipients=["admin@example.com", "ing@example.com"],
            logo_path=tmp_path / "missing-logo.jpg",
            brand="Onboarding",
        ),
        transport=outbox,
        state_path=tmp_path / "state" / "weekly_report.json",
        clock=clock,
    )
    await action_logger.dispatcher.start()
    app.state.action_logger = action_logger

    yield app

    await action_logger.dispatcher.stop()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac
