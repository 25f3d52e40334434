from functools import partial

from typing import Any, Dict, Generic, List, TypeVar
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

# region - template
T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """成功响应模型"""
    code: int = Field(200, description="状态码")
    message: str = Field("success", description="响应消息")
    data: T | None = Field(None, description="响应数据")
    timestamp: datetime = Field(default_factory=partial(datetime.now, tz=timezone.utc), description="时间戳")


class ErrorResponse(BaseModel):
    """错误响应模型

    code 为 0 表示请求根本没有到达服务端（连接失败、超时等）

    """
    code: int = Field(..., description="错误码")
    message: str = Field(..., description="错误消息")
    errors: Dict[str, str] = Field(default_factory=dict, description="字段 -> 错误信息（服务端校验）")
    timestamp: datetime = Field(default_factory=partial(datetime.now, tz=timezone.utc), description="时间戳")

    @property
    def is_rejected(self) -> bool:
        """服务端校验未通过，需要把 errors 交回表单"""
        return self.code == 422 and bool(self.errors)


# endregion


class NoteSchema(BaseModel):
    id: int | str | None = None
    title: str = ""
    body: str = ""
    due_date: str | None = None
    tags: List[str] = Field(default_factory=list)
    inserted_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value):
        # 服务端可能返回 null
        return value or []


class NoteRequest(BaseModel):
    """create/update 的请求体：{"note": {...}}"""
    note: Dict[str, Any]
