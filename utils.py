from datetime import date, datetime, timezone

import pytz
from loguru import logger

from settings import dynamic_settings


def format_date(value: str | date | None, placeholder: str = "No due date") -> str:
    """due_date 的展示，空值显示占位文本，无法解析时原样返回"""
    if not value:
        return placeholder
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        logger.debug("format_date: {!r} is not a calendar date", value)
        return value


def to_local_datetime(value: datetime, tz_name: str | None = None) -> datetime:
    """转为配置的时区，并移除时区信息与微秒，确保转字符串时无小数点和 +08:00"""
    if value.tzinfo is None:
        # 服务端约定返回 UTC
        value = value.replace(tzinfo=timezone.utc)
    aware_dt = value.astimezone(pytz.timezone(tz_name or dynamic_settings.timezone))
    return aware_dt.replace(tzinfo=None, microsecond=0)


def format_datetime(value: datetime | None, tz_name: str | None = None, placeholder: str = "-") -> str:
    if value is None:
        return placeholder
    return str(to_local_datetime(value, tz_name))
