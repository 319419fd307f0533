"""事件分类 -- 关键错误 / 问卷失败 判定

分类完全基于显式成员集合，而非命名约定：
不在 critical_codes 中的 ERR_* 代码永远不会触发告警。
集合可通过 INTAKE_CLASSIFICATION_FILE 指定的 JSON 文件覆盖。
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, ValidationError

from .config import get_classification_file

log = structlog.get_logger()

DEFAULT_CRITICAL_CODES: frozenset[str] = frozenset(
    {
        "ERR_050",  # 创建附件时的关键错误
        "ERR_060",  # 保存答案时的关键错误
        "ERR_008",  # 超过允许的最大字符数
        "ERR_COMM_FAILURE",
        "ERR_DB_CONNECTION",
        "ERR_SERVER",
        "ERR_RUNTIME",
        "ERR_FILESYSTEM",
        "ERR_MEMORY",
        "ERR_CONFIG",
        "ERR_AUTH",
    }
)

DEFAULT_FAILED_SURVEY_CODES: frozenset[str] = frozenset(
    {"ERR_005", "ERR_006", "ERR_007", "ERR_008", "ERR_050", "ERR_060"}
)


class ClassificationConfigError(ValueError):
    """分类配置文件不可读或内容非法"""


class ClassificationConfig(BaseModel):
    """分类配置 -- 静态数据，不从事件内容推导"""

    critical_codes: frozenset[str] = Field(
        default=DEFAULT_CRITICAL_CODES,
        description="出现即触发即时告警的代码",
    )
    failed_survey_codes: frozenset[str] = Field(
        default=DEFAULT_FAILED_SURVEY_CODES,
        description="计入问卷失败数的代码",
    )
    request_code_prefix: str = Field(default="INFO_REQUEST", description="HTTP 请求事件前缀")
    survey_success_code: str = Field(default="INFO_SURVEY_SUCCESS", description="问卷成功代码")
    error_code_prefix: str = Field(default="ERR_", description="错误事件前缀")
    user_id_fields: tuple[str, ...] = Field(
        default=("curp", "external_code"),
        description="data 中的用户标识字段（按优先级）",
    )


class EventClassifier:
    """事件分类器 -- 纯查找，无副作用"""

    def __init__(self, config: ClassificationConfig | None = None) -> None:
        self._config = config or ClassificationConfig()

    @property
    def config(self) -> ClassificationConfig:
        return self._config

    def is_critical(self, code: str) -> bool:
        return code in self._config.critical_codes

    def is_failed_survey(self, code: str) -> bool:
        return code in self._config.failed_survey_codes

    def is_request(self, code: str) -> bool:
        return code.startswith(self._config.request_code_prefix)

    def is_survey_success(self, code: str) -> bool:
        return code == self._config.survey_success_code

    def is_error(self, code: str) -> bool:
        return code.startswith(self._config.error_code_prefix)

    def user_id(self, data: dict[str, Any]) -> str | None:
        """提取用户标识：取第一个非空字段"""
        for field in self._config.user_id_fields:
            value = data.get(field)
            if value:
                return str(value)
        return None


def load_classification_config(path: Path | None = None) -> ClassificationConfig:
    """加载分类配置

    path 为空时读取 INTAKE_CLASSIFICATION_FILE；两者都未设置则使用内置默认值。
    文件中缺失的键保持默认值。

    Raises:
        ClassificationConfigError: 文件不可读、不是 JSON 对象或字段非法
    """
    path = path or get_classification_file()
    if path is None:
        return ClassificationConfig()

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ClassificationConfigError(f"无法读取分类配置 {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ClassificationConfigError(f"分类配置必须是 JSON 对象: {path}")

    try:
        config = ClassificationConfig(**raw)
    except ValidationError as e:
        raise ClassificationConfigError(f"分类配置字段非法 {path}: {e}") from e

    log.info(
        "classification_config_loaded",
        path=str(path),
        critical_codes=len(config.critical_codes),
        failed_survey_codes=len(config.failed_survey_codes),
    )
    return config
