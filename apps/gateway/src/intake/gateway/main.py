"""FastAPI 应用主文件

app 创建 + lifespan 管理：ActionLogger 组装、通知队列启动/停止、路由与异常处理注册。
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from intake.alerting import ActionLogger, create_action_logger, load_alerting_config
from intake.core.classification import load_classification_config
from intake.core.config import get_log_dir, get_report_state_file, get_timezone

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.request_log_mw import RequestLogMiddleware
from .routes import health

log = structlog.get_logger()


def install_loop_exception_handler(
    loop: asyncio.AbstractEventLoop,
    action_logger: ActionLogger,
) -> None:
    """后台任务中未被等待的异常记录为 ERR_RUNTIME，不终止进程"""

    def handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        try:
            action_logger.log_action(
                "ERR_RUNTIME",
                f"Uncaught exception: {exc or context.get('message', '')}",
                "gateway:loop_exception_handler",
                {
                    "message": context.get("message", ""),
                    "error_type": type(exc).__name__ if exc else None,
                },
            )
        except OSError as e:
            log.error("runtime_error_log_failed", error=str(e))
        loop.default_exception_handler(context)

    loop.set_exception_handler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时组装 ActionLogger，关闭时排空通知队列"""
    tz = get_timezone()
    alerting_config = load_alerting_config()
    action_logger = create_action_logger(
        log_dir=get_log_dir(),
        tz=tz,
        alerting_config=alerting_config,
        classification=load_classification_config(),
        state_path=get_report_state_file(),
    )
    await action_logger.dispatcher.start()
    install_loop_exception_handler(asyncio.get_running_loop(), action_logger)
    app.state.action_logger = action_logger

    log.info(
        "action_logger_initialized",
        log_path=str(action_logger.store.path),
        mail_mode=alerting_config.mail_mode,
        recipient_count=len(alerting_config.recipients),
    )
    action_logger.log_action("INFO_START", "Servidor iniciado", "gateway:lifespan")

    yield

    action_logger.log_action("INFO_SHUTDOWN", "Apagado del servidor", "gateway:lifespan")
    await action_logger.dispatcher.stop()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Intake Gateway",
        version="0.1.0",
        description="问卷接入后端 -- 事件记录、关键错误告警与周报",
        lifespan=lifespan,
    )

    # 注册中间件（后注册的在外层：LoggingMiddleware 先绑定 request_id）
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
