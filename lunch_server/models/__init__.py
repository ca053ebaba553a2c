"""
数据模型
"""

from .base import FrozenEntity, ConfigEntity
from .schedule import (
    OrderScheduleType,
    GroupingMode,
    RecurrenceRule,
    CutoffRule,
    GroupingRule,
    OrderScheduleConfig,
    LunchScheduleConfig,
)
from .order import ScheduleGroup, OrderRecord, ReconciledGroup, UserProfile, GroupLabel, ScheduleView

__all__ = [
    "FrozenEntity",
    "ConfigEntity",
    "OrderScheduleType",
    "GroupingMode",
    "RecurrenceRule",
    "CutoffRule",
    "GroupingRule",
    "OrderScheduleConfig",
    "LunchScheduleConfig",
    "ScheduleGroup",
    "OrderRecord",
    "ReconciledGroup",
    "UserProfile",
    "GroupLabel",
    "ScheduleView",
]
