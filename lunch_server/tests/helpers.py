"""
测试辅助常量和函数
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

TZ_NAME = "America/New_York"
TZ = ZoneInfo(TZ_NAME)
WEEKDAYS = {1, 2, 3, 4, 5}

MONDAY = date(2026, 10, 19)
NEXT_MONDAY = date(2026, 10, 26)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """组织时区下的某一时刻"""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)


def weekdays_between(start: date, count: int):
    """从 start 开始的 count 个工作日"""
    days = []
    day = start
    while len(days) < count:
        if day.isoweekday() <= 5:
            days.append(day)
        day = date.fromordinal(day.toordinal() + 1)
    return tuple(days)
