"""依赖注入模块 -- 通过 FastAPI Depends 注入 ActionLogger

ActionLogger 通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from intake.alerting import ActionLogger


def get_action_logger(request: Request) -> ActionLogger:
    """从 app.state 获取 ActionLogger 实例"""
    return request.app.state.action_logger
