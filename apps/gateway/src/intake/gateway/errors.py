"""异常处理 -- 将未处理异常归类为事件代码并记录

分类结果决定是否触发关键错误告警（ERR_DB_CONNECTION / ERR_FILESYSTEM /
ERR_MEMORY / ERR_AUTH / ERR_CONFIG / ERR_SERVER 默认都在关键集合中）。
生产环境（INTAKE_ENV=production）响应不暴露异常信息。
"""

import os
import socket
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from intake.core.classification import ClassificationConfigError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from .middleware.logging_mw import get_request_id

ORIGIN = "gateway:error_handler"

GENERIC_ERROR_MESSAGE = "Ha ocurrido un error interno. Por favor intente más tarde."


def classify_exception(exc: BaseException) -> tuple[str, str]:
    """将异常映射为 (事件代码, 描述)"""
    if isinstance(exc, (ConnectionError, TimeoutError, socket.gaierror)):
        return "ERR_DB_CONNECTION", "Error de conexión a base de datos o servicios"
    if isinstance(exc, (FileNotFoundError, PermissionError, IsADirectoryError)):
        return "ERR_FILESYSTEM", "Error en el sistema de archivos"
    if isinstance(exc, MemoryError):
        return "ERR_MEMORY", "Error de memoria en el servidor"
    if isinstance(exc, ClassificationConfigError):
        return "ERR_CONFIG", "Error en la configuración del entorno"
    return "ERR_SERVER", "Error no controlado del servidor"


def classify_http_status(status_code: int) -> tuple[str, str] | None:
    """将 HTTP 错误状态映射为 (事件代码, 描述)，无需记录时返回 None"""
    if status_code == 404:
        return "WARN_NOT_FOUND", "Ruta no encontrada"
    if status_code in (401, 403):
        return "ERR_AUTH", "Error de autenticación o autorización"
    if status_code == 413:
        return "ERR_PAYLOAD", "Tamaño de solicitud excedido"
    if status_code == 429:
        return "ERR_RATE_LIMIT", "Límite de solicitudes excedido"
    return None


def _is_production() -> bool:
    return os.environ.get("INTAKE_ENV", "development") == "production"


def _log_action(request: Request, code: str, description: str, data: dict) -> None:
    action_logger = getattr(request.app.state, "action_logger", None)
    if action_logger is not None:
        action_logger.log_action(code, description, ORIGIN, data)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """未处理异常 -> 分类事件 + 500"""
    code, description = classify_exception(exc)
    _log_action(
        request,
        code,
        description,
        {
            "message": str(exc),
            "error_type": type(exc).__name__,
            "stack": "".join(traceback.format_exception(exc)),
            "path": request.url.path,
            "method": request.method,
            "request_id": get_request_id(request),
        },
    )
    message = GENERIC_ERROR_MESSAGE if _is_production() else (str(exc) or "Error interno del servidor")
    return JSONResponse(status_code=500, content={"message": message})


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTP 错误 -> 按状态码记录事件"""
    classified = classify_http_status(exc.status_code)
    if classified is not None:
        code, description = classified
        _log_action(
            request,
            code,
            description,
            {
                "message": str(exc.detail),
                "path": request.url.path,
                "method": request.method,
                "ip": request.client.host if request.client else None,
            },
        )

    if exc.status_code == 404:
        content = {"message": "Recurso no encontrado"}
    else:
        content = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体解析/校验失败 -> ERR_PARSING + 422"""
    _log_action(
        request,
        "ERR_PARSING",
        "Error al analizar el cuerpo de la solicitud",
        {
            "errors": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                for error in exc.errors()
            ],
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(status_code=422, content={"message": "Solicitud inválida"})


def register_exception_handlers(app: FastAPI) -> None:
    """注册全部异常处理器"""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
