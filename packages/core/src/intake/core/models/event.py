"""Event Domain Model -- 事件日志记录

事件日志 append-only，写入后不可修改、删除或重排。
每条事件序列化为一行紧凑 JSON：
{"timestamp":"<ISO-8601 含偏移>","code":"..","description":"..","origin":"..","data":{..}}
"""

import json
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator


class Event(BaseModel):
    """Event 数据模型

    code 为开放字符串（INFO_* / ERR_* / WARN_* 为约定前缀），不是封闭枚举。
    """

    model_config = ConfigDict(frozen=True)

    timestamp: AwareDatetime = Field(description="记录创建时的挂钟时间（固定时区）")
    code: str = Field(description="事件代码")
    description: str = Field(default="", description="人类可读描述")
    origin: str = Field(default="", description="调用点（component:operation）")
    data: dict[str, Any] = Field(default_factory=dict, description="任意结构的附加数据")

    @field_validator("data", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_record(self) -> str:
        """序列化为单行 JSON（不含换行符）

        无法 JSON 化的 data 值按 str() 输出，保证写日志不会因 payload 失败。
        """
        return json.dumps(
            {
                "timestamp": self.timestamp.isoformat(timespec="milliseconds"),
                "code": self.code,
                "description": self.description,
                "origin": self.origin,
                "data": self.data,
            },
            ensure_ascii=False,
            separators=(",", ":"),
            default=str,
        )

    @classmethod
    def from_record(cls, line: str) -> "Event":
        """从单行 JSON 解析事件

        Raises:
            ValueError: 行不是合法 JSON 或字段校验失败（pydantic.ValidationError 是其子类）
        """
        raw = json.loads(line)
        if not isinstance(raw, dict):
            raise ValueError("log record is not a JSON object")
        return cls.model_validate(raw)
