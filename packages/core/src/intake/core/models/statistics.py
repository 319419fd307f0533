"""周统计数据模型

每次生成周报时从事件日志重新计算，不持久化。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorCounts(BaseModel):
    """错误计数（按分类器划分）"""

    critical: int = Field(default=0, ge=0, description="关键错误数")
    normal: int = Field(default=0, ge=0, description="普通错误数")


class ErrorTypeSummary(BaseModel):
    """单个错误代码的出现次数"""

    count: int = Field(default=0, ge=0, description="出现次数")
    description: str = Field(description="首次出现时的描述（代表性描述）")


class WeeklyStatistics(BaseModel):
    """周统计结果

    errors_by_type 保持首次出现顺序，周报表格按此顺序渲染。
    """

    period_start: datetime = Field(description="窗口起点（含）")
    period_end: datetime = Field(description="窗口终点（含）")
    total_requests: int = Field(default=0, ge=0, description="HTTP 请求数")
    successful_surveys: int = Field(default=0, ge=0, description="成功提交的问卷数")
    failed_surveys: int = Field(default=0, ge=0, description="失败的问卷数")
    errors: ErrorCounts = Field(default_factory=ErrorCounts, description="错误计数")
    unique_users: set[str] = Field(
        default_factory=set,
        description="去重用户标识（CURP 或外部编码）",
    )
    errors_by_type: dict[str, ErrorTypeSummary] = Field(
        default_factory=dict,
        description="错误代码 -> 出现次数与代表性描述",
    )

    @property
    def unique_user_count(self) -> int:
        return len(self.unique_users)
