"""LoggingMiddleware -- 请求 ID 与请求耗时

每个请求生成 ULID request_id：
- 绑定到 structlog contextvars（本请求内的所有日志都带 request_id）
- 写入 request.state，供 INFO_REQUEST 事件与错误事件的 data 关联同一请求
- 写入 X-Request-ID 响应头
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

log = structlog.get_logger()


def get_request_id(request: Request) -> str | None:
    """当前请求的 request_id（未经过 LoggingMiddleware 时为 None）"""
    return getattr(request.state, "request_id", None)


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求 ID 中间件（需注册在 RequestLogMiddleware 外层）"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response = await call_next(request)

        log.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        return response
