"""邮件内容渲染 -- 关键错误告警与周报

渲染函数为纯函数（无 I/O），唯一的 I/O 是显式的 load_logo_html()。
模板使用 Jinja2 自动转义，事件内容不会注入 HTML。
"""

import base64
import json
from datetime import datetime
from pathlib import Path
from typing import Final
from zoneinfo import ZoneInfo

import structlog
from jinja2 import Environment, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel, Field

from intake.core.models import Event, WeeklyStatistics

log = structlog.get_logger()

_JINJA_ENV: Final[Environment] = Environment(autoescape=select_autoescape(default=True))

LOGO_PLACEHOLDER: Final[Markup] = Markup('<div style="height: 50px;"></div>')

CRITICAL_SUBJECT_TEMPLATE: Final[str] = "⚠️ ERROR CRÍTICO - {brand}"
WEEKLY_SUBJECT_TEMPLATE: Final[str] = "📊 Reporte Semanal - {brand}"

_CRITICAL_ALERT_TEMPLATE: Final[str] = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 5px;">
  <div style="text-align: center; margin-bottom: 20px;">{{ logo_html }}</div>
  <h2 style="color: #d32f2f; text-align: center;">Error Crítico Detectado</h2>
  <p><strong>Fecha y Hora:</strong> {{ timestamp }}</p>
  <p><strong>Código:</strong> {{ event.code }}</p>
  <p><strong>Descripción:</strong> {{ event.description }}</p>
  <p><strong>Origen:</strong> {{ event.origin }}</p>
  <p><strong>Detalles:</strong></p>
  <pre style="background-color: #f5f5f5; padding: 10px; border-radius: 5px; overflow-x: auto;">{{ data_dump }}</pre>
  <p style="text-align: center; font-size: 12px; color: #757575;">{{ brand }} - {{ year }}</p>
</div>"""

_WEEKLY_DIGEST_TEMPLATE: Final[str] = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 5px;">
  <div style="text-align: center; margin-bottom: 20px;">{{ logo_html }}</div>
  <h2 style="color: #1976d2; text-align: center;">REPORTE SEMANAL {{ brand | upper }}</h2>
  <p><strong>Período:</strong> {{ period_start }} - {{ period_end }}</p>

  <h3>Estadísticas Generales</h3>
  <table border="1" cellpadding="5" cellspacing="0" style="border-collapse: collapse; width: 100%;">
    <tr style="background-color: #f2f2f2;"><th>Métrica</th><th>Valor</th></tr>
    {% for label, value in metrics %}
    <tr><td>{{ label }}</td><td>{{ value }}</td></tr>
    {% endfor %}
  </table>

  {% if errors_by_type %}
  <h3>Errores Detectados</h3>
  <div style="font-size: 80%;">
    <table border="1" cellpadding="5" cellspacing="0" style="border-collapse: collapse; width: 100%;">
      <tr style="background-color: #f2f2f2;"><th>Código</th><th>Descripción</th><th>Ocurrencias</th></tr>
      {% for code, summary in errors_by_type.items() %}
      <tr><td>{{ code }}</td><td>{{ summary.description }}</td><td>{{ summary.count }}</td></tr>
      {% endfor %}
    </table>
  </div>
  {% else %}
  <p>No se detectaron errores en la última semana. ¡Sistema funcionando correctamente!</p>
  {% endif %}

  <p style="text-align: center; font-size: 12px; color: #757575; margin-top: 30px;">
    {{ brand }} - Reporte Generado el {{ generated_at }}
  </p>
</div>"""


class ComposedMessage(BaseModel):
    """渲染完成的邮件（主题 + HTML 正文）"""

    subject: str = Field(description="邮件主题")
    html: str = Field(description="HTML 正文")


def format_date(value: datetime, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%d/%m/%Y")


def format_datetime(value: datetime, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%d/%m/%Y %H:%M:%S")


def load_logo_html(path: Path) -> Markup:
    """读取 logo 并转为内联 base64 <img>

    读取失败时记录日志并返回空白占位，不影响整封邮件的渲染。
    """
    try:
        logo_base64 = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    except OSError as e:
        log.warning("logo_load_failed", path=str(path), error=str(e))
        return LOGO_PLACEHOLDER
    return Markup(
        '<img src="data:image/jpeg;base64,{}" alt="Logo" style="max-width: 150px;" />'
    ).format(logo_base64)


def dump_event_data(event: Event) -> str:
    """将 data 原样格式化为缩进 JSON（调试用）"""
    return json.dumps(event.data, indent=2, ensure_ascii=False, default=str)


def compose_critical_alert(
    event: Event,
    logo_html: Markup,
    brand: str,
    tz: ZoneInfo,
) -> ComposedMessage:
    """渲染关键错误告警邮件"""
    html = _JINJA_ENV.from_string(_CRITICAL_ALERT_TEMPLATE).render(
        logo_html=logo_html,
        event=event,
        timestamp=format_datetime(event.timestamp, tz),
        data_dump=dump_event_data(event),
        brand=brand,
        year=event.timestamp.astimezone(tz).year,
    )
    return ComposedMessage(subject=CRITICAL_SUBJECT_TEMPLATE.format(brand=brand), html=html)


def compose_weekly_digest(
    statistics: WeeklyStatistics,
    logo_html: Markup,
    brand: str,
    generated_at: datetime,
    tz: ZoneInfo,
) -> ComposedMessage:
    """渲染周报邮件

    错误明细为空时输出明确的"无错误"说明而不是空表格。
    """
    metrics = [
        ("Total de Peticiones", statistics.total_requests),
        ("Encuestas Completadas Exitosamente", statistics.successful_surveys),
        ("Encuestas Fallidas", statistics.failed_surveys),
        ("Usuarios Únicos", statistics.unique_user_count),
        ("Errores Críticos", statistics.errors.critical),
        ("Errores Normales", statistics.errors.normal),
    ]
    html = _JINJA_ENV.from_string(_WEEKLY_DIGEST_TEMPLATE).render(
        logo_html=logo_html,
        brand=brand,
        period_start=format_date(statistics.period_start, tz),
        period_end=format_date(statistics.period_end, tz),
        metrics=metrics,
        errors_by_type=statistics.errors_by_type,
        generated_at=format_datetime(generated_at, tz),
    )
    return ComposedMessage(subject=WEEKLY_SUBJECT_TEMPLATE.format(brand=brand), html=html)
