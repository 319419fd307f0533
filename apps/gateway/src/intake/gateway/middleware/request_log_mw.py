"""RequestLogMiddleware -- 每个请求写入 INFO_REQUEST 事件

静态资源请求（/css/、/js/、/img/）不记录，避免日志被刷屏。
INFO_REQUEST 事件是周报"请求总数"的数据来源，data 中的 request_id 与 X-Request-ID 响应头一致。
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .logging_mw import get_request_id

STATIC_PREFIXES: tuple[str, ...] = ("/css/", "/js/", "/img/")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """请求事件中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        action_logger = getattr(request.app.state, "action_logger", None)
        if action_logger is not None and not request.url.path.startswith(STATIC_PREFIXES):
            url = request.url.path
            if request.url.query:
                url = f"{url}?{request.url.query}"
            action_logger.log_action(
                "INFO_REQUEST",
                "Petición HTTP recibida",
                "gateway:request_log",
                {
                    "method": request.method,
                    "url": url,
                    "ip": request.client.host if request.client else None,
                    "user_agent": request.headers.get("user-agent"),
                    "request_id": get_request_id(request),
                },
            )

        return await call_next(request)
