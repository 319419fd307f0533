"""structlog 配置模块

action_logged（事件日志写入回显）在两种模式下都输出为一行可读文本：
    [2026-10-19T07:03:12.511-06:00] [ERR_SERVER] [gateway:error_handler] - descripción
其余日志：
- dev 模式：ConsoleRenderer 可读输出
- json 模式：结构化 JSON 输出
"""

import logging
import os
from typing import Any

import structlog

ACTION_EVENT = "action_logged"
ACTION_LINE_KEY = "action_line"


def format_action_line(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """为 action_logged 预先生成控制台行

    必须排在 TimeStamper 之前：TimeStamper 会覆盖 timestamp 键，
    而控制台行要显示的是事件自身的时间戳。
    """
    if event_dict.get("event") == ACTION_EVENT:
        event_dict[ACTION_LINE_KEY] = (
            f"[{event_dict.get('timestamp', '')}] "
            f"[{event_dict.get('code', '')}] "
            f"[{event_dict.get('origin', '')}] - "
            f"{event_dict.get('description', '')}"
        )
    return event_dict


class ActionLineRenderer:
    """最终渲染器：action_logged 输出预生成的行，其余事件交给 dev/json 渲染器"""

    def __init__(self, fallback: structlog.types.Processor) -> None:
        self._fallback = fallback

    def __call__(
        self, logger: Any, method_name: str, event_dict: structlog.types.EventDict
    ) -> str:
        line = event_dict.get(ACTION_LINE_KEY)
        if line is not None:
            return line
        return self._fallback(logger, method_name, event_dict)


def build_renderer(log_format: str) -> ActionLineRenderer:
    """按日志格式构建最终渲染器（"json" 或 "dev"）"""
    if log_format == "json":
        fallback = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        fallback = structlog.dev.ConsoleRenderer()
    return ActionLineRenderer(fallback)


def setup_logging() -> None:
    """初始化 structlog 配置

    INTAKE_LOG_FORMAT: "json"（生产环境）或 "dev"（默认）
    INTAKE_LOG_LEVEL: 标准库日志级别名，默认 INFO
    """
    log_format = os.environ.get("INTAKE_LOG_FORMAT", "dev")
    log_level = os.environ.get("INTAKE_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        format_action_line,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn 等标准库日志走同一渲染器
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=build_renderer(log_format),
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
