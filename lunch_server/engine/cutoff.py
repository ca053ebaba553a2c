"""
截止时间计算
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..core.exceptions import MalformedConfigError
from ..models.order import ScheduleGroup
from ..models.schedule import LunchScheduleConfig, OrderScheduleConfig


def localize(now: datetime, config: OrderScheduleConfig) -> datetime:
    """不带时区的 now 按组织时区解释"""
    if now.tzinfo is None:
        return now.replace(tzinfo=config.tz)
    return now.astimezone(config.tz)


def cutoff_instant(config: OrderScheduleConfig, reference_date: date) -> datetime:
    """
    计算参考日期对应的截止时刻
    
    参考日期当天的 time_of_day（组织时区）再加上 offset。
    offset 按绝对时长计算，跨夏令时切换时不按挂钟时间折算。
    """
    anchor = datetime.combine(reference_date, config.cutoff.time_of_day.replace(tzinfo=None), tzinfo=config.tz)
    return (anchor.astimezone(timezone.utc) + config.cutoff.offset).astimezone(config.tz)


def _reference_date(group: ScheduleGroup, lunch_config: Optional[LunchScheduleConfig]) -> date:
    if lunch_config is None:
        return group.first_date
    if lunch_config.dependent:
        raise MalformedConfigError("午餐排期需要先按用户解析")
    # 周期内第一个供应午餐的日期；外部构造的分组可能夹带非午餐日
    for day in group.dates:
        if lunch_config.schedule.matches(day):
            return day
    return group.first_date


def group_cutoff(
    group: ScheduleGroup,
    config: OrderScheduleConfig,
    lunch_config: Optional[LunchScheduleConfig] = None
) -> datetime:
    """订餐周期的截止时刻"""
    return cutoff_instant(config, _reference_date(group, lunch_config))


def is_before_cutoff(
    group: ScheduleGroup,
    config: OrderScheduleConfig,
    lunch_config: Optional[LunchScheduleConfig],
    now: datetime
) -> bool:
    """now 严格早于截止时刻时返回 True；恰好等于截止时刻视为已截止"""
    return localize(now, config) < group_cutoff(group, config, lunch_config)


def cutoff_boundary_date(config: OrderScheduleConfig, now: datetime) -> date:
    """
    当前周期的截止边界日期
    
    即截止时刻仍晚于 now 的最早日期；早于该日期的订单已经过期。
    """
    now = localize(now, config)
    day = (now - config.cutoff.offset).date() - timedelta(days=2)
    while cutoff_instant(config, day) <= now:
        day += timedelta(days=1)
    return day
