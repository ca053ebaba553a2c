"""
订餐排期引擎

纯函数集合：不做 I/O、不持有可变状态，当前时间由调用方注入。
调用顺序：用户排期选择 -> 日历解析 -> 周期分组 -> (截止判断, 订单对账)
"""

from .calendar import resolve_open_dates, resolve_lunch_dates
from .partition import partition, window_groups
from .cutoff import cutoff_instant, cutoff_boundary_date, group_cutoff, is_before_cutoff
from .reconcile import reconcile, orderable_groups, EXPIRED_INDEX
from .selector import resolve_for_user
from .labels import describe_group, cutoff_label

__all__ = [
    "resolve_open_dates",
    "resolve_lunch_dates",
    "partition",
    "window_groups",
    "cutoff_instant",
    "cutoff_boundary_date",
    "group_cutoff",
    "is_before_cutoff",
    "reconcile",
    "orderable_groups",
    "EXPIRED_INDEX",
    "resolve_for_user",
    "describe_group",
    "cutoff_label",
]
