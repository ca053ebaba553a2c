"""
周期分组
把有序日期序列切分为订餐周期（ScheduleGroup）
"""

from datetime import date
from itertools import groupby
from typing import Iterable, List, Optional, Tuple

from ..core.exceptions import InvalidRangeError, MalformedConfigError
from ..models.order import ScheduleGroup
from ..models.schedule import GroupingMode, GroupingRule, LunchScheduleConfig, OrderScheduleConfig, OrderScheduleType
from .calendar import resolve_lunch_dates


def _fixed_size_chunks(dates: Tuple[date, ...], size: int) -> List[Tuple[date, ...]]:
    return [dates[i:i + size] for i in range(0, len(dates), size)]


def _weekly_chunks(dates: Tuple[date, ...]) -> List[Tuple[date, ...]]:
    # 午餐日可能很稀疏，按 ISO 周划分而不是按自然周逐天补齐
    return [tuple(chunk) for _, chunk in groupby(dates, key=lambda d: d.isocalendar()[:2])]


def partition(
    dates: Iterable[date],
    schedule_type: OrderScheduleType,
    grouping: Optional[GroupingRule] = None
) -> Tuple[ScheduleGroup, ...]:
    """
    将日期切分为订餐周期
    
    DAILY 每天一组；CUSTOM 按分组规则贪心切分，末尾不足一组的日期也单独成组。
    所有分组首尾相接恰好等于输入序列。
    
    Raises:
        MalformedConfigError: 输入日期不是严格递增，或 CUSTOM 缺少分组规则时
    """
    dates = tuple(dates)
    if any(a >= b for a, b in zip(dates, dates[1:])):
        raise MalformedConfigError("待分组的日期必须严格递增")
    
    if schedule_type is OrderScheduleType.DAILY:
        chunks = [(day,) for day in dates]
    elif schedule_type is OrderScheduleType.CUSTOM:
        if grouping is None:
            raise MalformedConfigError("CUSTOM 排期缺少分组规则")
        if grouping.mode is GroupingMode.FIXED_SIZE:
            chunks = _fixed_size_chunks(dates, grouping.size)
        elif grouping.mode is GroupingMode.WEEKLY:
            chunks = _weekly_chunks(dates)
        else:
            raise MalformedConfigError(f"未知的分组方式: {grouping.mode}")
    else:
        raise MalformedConfigError(f"未知的排期类型: {schedule_type}")
    
    return tuple(ScheduleGroup(ordinal=i, dates=chunk) for i, chunk in enumerate(chunks))


def window_groups(
    order_config: OrderScheduleConfig,
    lunch_config: LunchScheduleConfig,
    start: date,
    end: date
) -> Tuple[ScheduleGroup, ...]:
    """
    窗口 [start, end] 内的订餐周期
    
    FIXED_SIZE 周期从 lunch_config.fixed_size_origin 开始计数，再丢弃在 start 之前结束的周期，
    因此无论哪天查看，同一批午餐日总是落在同一个周期里。
    跨过 start 的周期保留完整日期。ordinal 按窗口内的位置从 0 重新编号。
    
    Raises:
        InvalidRangeError: start 晚于 end
        MalformedConfigError: lunch_config 尚未按用户解析
    """
    if start > end:
        raise InvalidRangeError(f"起始日期 {start} 晚于结束日期 {end}")
    
    grouping = lunch_config.grouping
    origin = start
    if (order_config.schedule_type is OrderScheduleType.CUSTOM
            and grouping.mode is GroupingMode.FIXED_SIZE):
        origin = min(start, lunch_config.fixed_size_origin or start)
    
    dates = resolve_lunch_dates(order_config, lunch_config, origin, end)
    groups = partition(dates, order_config.schedule_type, grouping)
    visible = [group for group in groups if group.last_date >= start]
    return tuple(ScheduleGroup(ordinal=i, dates=group.dates) for i, group in enumerate(visible))
