"""健康检查与诊断路由

GET /: 健康检查，记录 INFO_HEALTH。
GET /health: Liveness 检查，永远返回 200，附带通知队列计数。
GET /test-error: 手动触发一条关键错误，用于验证告警邮件链路。
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..deps import get_action_logger

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root(action_logger=Depends(get_action_logger)):
    """健康检查 -- 记录 INFO_HEALTH"""
    action_logger.log_action("INFO_HEALTH", "Verificación de salud", "gateway:health")
    return "🟢 Aplicación corriendo"


@router.get("/health")
async def health(action_logger=Depends(get_action_logger)):
    """Liveness 检查 -- 永远返回 200"""
    return {
        "status": "ok",
        "notifications": action_logger.dispatcher.stats.model_dump(),
    }


@router.get("/test-error")
async def test_error(action_logger=Depends(get_action_logger)):
    """触发一条关键错误事件（ERR_008 在默认关键集合中）"""
    action_logger.log_action(
        "ERR_008",
        "💥 Prueba de error crítico manual",
        "gateway:test_error",
        {"mensaje": "Esto es una prueba para forzar un error crítico"},
    )
    return {"message": "Error crítico de prueba generado"}
