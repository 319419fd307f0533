"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient fixture"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from intake.alerting import AlertingConfig, LogMailTransport, create_action_logger


@pytest_asyncio.fixture
async def gateway_mail() -> LogMailTransport:
    return LogMailTransport()


@pytest_asyncio.fixture
async def app(tmp_log_dir, tmp_path, tz, clock, gateway_mail):
    """创建测试用 FastAPI app 实例（手动初始化 ActionLogger，绕过 lifespan）"""
    from intake.gateway.main import create_app

    application = create_app()
    action_logger = create_action_logger(
        log_dir=tmp_log_dir,
        tz=tz,
        alerting_config=AlertingConfig(
            mail_mode="log",
            email_user="alerts@example.com",
            recipients=["admin@example.com"],
            logo_path=tmp_path / "missing-logo.jpg",
        ),
        transport=gateway_mail,
        clock=clock,
    )
    await action_logger.dispatcher.start()
    application.state.action_logger = action_logger

    yield application

    await action_logger.dispatcher.stop()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试（应用异常转为 500 响应）"""
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def logged_codes(app):
    """返回读取日志中事件代码（按写入顺序）的函数"""

    def _codes() -> list[str]:
        return [event.code for event in app.state.action_logger.store.read_all()]

    return _codes
