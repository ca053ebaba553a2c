"""
排期配置相关数据模型

- OrderScheduleConfig: 哪些日期开放订餐、如何截止
- LunchScheduleConfig: 哪些日期供应午餐、日期如何分组；可按用户属性区分
"""

from datetime import date, time, timedelta
from enum import Enum
from typing import Dict, FrozenSet, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator

from ..config.settings import settings
from .base import ConfigEntity


ISO_WEEKDAYS = frozenset(range(1, 8))


class OrderScheduleType(str, Enum):
    """订餐周期类型"""
    DAILY = "daily"      # 每天单独下单
    CUSTOM = "custom"    # 多天合并为一个订餐周期


class GroupingMode(str, Enum):
    """CUSTOM 周期下的分组方式"""
    FIXED_SIZE = "fixed_size"  # 每 size 个午餐日为一组
    WEEKLY = "weekly"          # 同一 ISO 周内的午餐日为一组


class RecurrenceRule(ConfigEntity):
    """重复规则：星期掩码 + 停餐日 + 起止边界"""
    days_of_week: FrozenSet[int] = Field(..., description="ISO 星期，1=周一 ... 7=周日")
    blackout_dates: FrozenSet[date] = Field(default_factory=frozenset, description="停餐日期")
    start: Optional[date] = Field(None, description="规则生效起始日（含）")
    end: Optional[date] = Field(None, description="规则生效结束日（含）")
    
    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v):
        unknown = set(v) - ISO_WEEKDAYS
        if unknown:
            raise ValueError(f"非法的星期值: {sorted(unknown)}")
        return v
    
    @model_validator(mode="after")
    def validate_bounds(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError("规则起始日不能晚于结束日")
        return self
    
    def matches(self, day: date) -> bool:
        """判断某一天是否满足该规则"""
        if day.isoweekday() not in self.days_of_week:
            return False
        if day in self.blackout_dates:
            return False
        if self.start and day < self.start:
            return False
        if self.end and day > self.end:
            return False
        return True


class CutoffRule(ConfigEntity):
    """截止规则：参考日期当天的 time_of_day 再加上带符号的 offset"""
    time_of_day: time = Field(..., description="截止时刻锚点")
    offset: timedelta = Field(timedelta(0), description="相对锚点的偏移，负数表示提前")


class GroupingRule(ConfigEntity):
    """分组规则"""
    mode: GroupingMode = Field(GroupingMode.WEEKLY, description="分组方式")
    size: Optional[int] = Field(None, ge=1, description="FIXED_SIZE 模式下每组的天数")
    anchor: Optional[date] = Field(None, description="FIXED_SIZE 模式下开始计数的日期，未指定时使用午餐规则的 start")
    
    @model_validator(mode="after")
    def validate_size(self):
        if self.mode is GroupingMode.FIXED_SIZE and self.size is None:
            raise ValueError("FIXED_SIZE 分组必须指定 size")
        return self


class OrderScheduleConfig(ConfigEntity):
    """订餐排期配置（组织级，只读）"""
    schedule_type: OrderScheduleType = Field(..., description="订餐周期类型")
    recurrence: RecurrenceRule = Field(..., description="开放订餐的日期规则")
    cutoff: CutoffRule = Field(..., description="截止规则")
    timezone: str = Field(default_factory=lambda: settings.default_timezone, description="IANA 时区")
    window_days: int = Field(default_factory=lambda: settings.default_window_days, ge=0,
                             description="订餐窗口向后延伸的天数")
    
    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"未知时区: {v}")
        return v
    
    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class LunchScheduleConfig(ConfigEntity):
    """午餐排期配置

    dependent=False 时直接使用 schedule/grouping；
    dependent=True 时按用户属性 key 在 schedules 中选择子配置。
    """
    dependent: bool = Field(False, description="是否按用户属性区分")
    schedule: Optional[RecurrenceRule] = Field(None, description="午餐日规则")
    grouping: GroupingRule = Field(default_factory=GroupingRule, description="订餐周期分组规则")
    key: Optional[str] = Field(None, description="用户属性名，例如 site")
    schedules: Dict[str, "LunchScheduleConfig"] = Field(default_factory=dict, description="按属性值划分的子配置")
    
    @model_validator(mode="after")
    def validate_shape(self):
        if self.dependent:
            if not self.key:
                raise ValueError("按用户区分的午餐排期必须指定 key")
            if not self.schedules:
                raise ValueError("按用户区分的午餐排期必须提供 schedules")
            for name, sub in self.schedules.items():
                if sub.dependent:
                    raise ValueError(f"子配置 {name} 不能再按用户区分")
        elif self.schedule is None:
            raise ValueError("午餐排期缺少 schedule")
        elif self.grouping.mode is GroupingMode.FIXED_SIZE and self.fixed_size_origin is None:
            raise ValueError("FIXED_SIZE 分组需要 grouping.anchor 或 schedule.start 作为计数起点")
        return self
    
    @property
    def fixed_size_origin(self) -> Optional[date]:
        """FIXED_SIZE 周期的计数起点，同一组织的周期边界不随查看日期移动"""
        if self.schedule is None:
            return None
        return self.grouping.anchor or self.schedule.start


LunchScheduleConfig.model_rebuild()
