"""
日历解析
根据重复规则计算日期窗口内开放订餐的日期
"""

from datetime import date, timedelta
from typing import Iterator, Tuple, Union

from ..core.exceptions import InvalidRangeError, MalformedConfigError
from ..models.schedule import LunchScheduleConfig, OrderScheduleConfig, RecurrenceRule


def iter_days(start: date, end: date) -> Iterator[date]:
    """按天遍历 [start, end]"""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def resolve_open_dates(
    config: Union[OrderScheduleConfig, RecurrenceRule],
    start: date,
    end: date
) -> Tuple[date, ...]:
    """
    计算窗口内开放订餐的日期
    
    Args:
        config: 订餐排期配置（或直接传入重复规则）
        start: 窗口起始日期（含）
        end: 窗口结束日期（含）
        
    Returns:
        tuple: 严格递增的日期序列，没有匹配日期时为空
        
    Raises:
        InvalidRangeError: start 晚于 end 时
    """
    if start > end:
        raise InvalidRangeError(
            f"起始日期 {start} 晚于结束日期 {end}",
            details={"start": start.isoformat(), "end": end.isoformat()}
        )
    
    rule = config.recurrence if isinstance(config, OrderScheduleConfig) else config
    
    # 与规则自身的边界取交集
    lo = max(start, rule.start) if rule.start else start
    hi = min(end, rule.end) if rule.end else end
    
    return tuple(day for day in iter_days(lo, hi) if rule.matches(day))


def resolve_lunch_dates(
    order_config: OrderScheduleConfig,
    lunch_config: LunchScheduleConfig,
    start: date,
    end: date
) -> Tuple[date, ...]:
    """既开放订餐又供应午餐的日期；lunch_config 必须已按用户解析"""
    if lunch_config.dependent:
        raise MalformedConfigError("午餐排期需要先按用户解析")
    
    open_dates = resolve_open_dates(order_config, start, end)
    return tuple(day for day in open_dates if lunch_config.schedule.matches(day))
