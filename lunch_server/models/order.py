"""
订单与排期分组相关数据模型
"""

from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import Field, computed_field, field_validator, model_validator

from .base import FrozenEntity


def _strictly_increasing(dates) -> bool:
    return all(a < b for a, b in zip(dates, dates[1:]))


class ScheduleGroup(FrozenEntity):
    """一个订餐周期：一个或多个按顺序排列的日期"""
    ordinal: int = Field(..., ge=0, description="在窗口内的序号")
    dates: Tuple[date, ...] = Field(..., min_length=1, description="周期内的日期")
    
    @field_validator("dates")
    @classmethod
    def validate_dates(cls, v):
        if not _strictly_increasing(v):
            raise ValueError("分组内日期必须严格递增")
        return v
    
    @property
    def first_date(self) -> date:
        return self.dates[0]
    
    @property
    def last_date(self) -> date:
        return self.dates[-1]
    
    def contains(self, day: date) -> bool:
        return day in self.dates


class OrderRecord(FrozenEntity):
    """已持久化的订单快照

    DAILY 排期下只有一个日期；CUSTOM 排期下可以覆盖一个周期内的多个日期。
    payload 是不透明的业务数据（菜品、备注等），引擎不解析。
    """
    order_id: str = Field(..., description="订单ID")
    dates: Tuple[date, ...] = Field(..., min_length=1, description="订单覆盖的日期")
    payload: Dict[str, Any] = Field(default_factory=dict, description="订单数据")
    
    @model_validator(mode="before")
    @classmethod
    def accept_single_date(cls, data):
        if isinstance(data, dict) and "date" in data and "dates" not in data:
            data = dict(data)
            data["dates"] = (data.pop("date"),)
        return data
    
    @field_validator("dates")
    @classmethod
    def normalize_dates(cls, v):
        return tuple(sorted(set(v)))
    
    @property
    def first_date(self) -> date:
        return self.dates[0]
    
    @property
    def last_date(self) -> date:
        return self.dates[-1]


class ReconciledGroup(FrozenEntity):
    """引擎输出：带订单匹配、可用序号和可编辑标记的订餐周期"""
    group: ScheduleGroup
    order_ids: Tuple[str, ...] = Field(default_factory=tuple, description="匹配到的订单ID")
    availability_index: Optional[int] = Field(None, description="未下单周期的可用序号，-1 表示已过截止")
    editable: bool = Field(..., description="是否仍在截止之前")
    cutoff_at: datetime = Field(..., description="截止时刻")
    
    @computed_field
    @property
    def claimed(self) -> bool:
        return bool(self.order_ids)
    
    @property
    def dates(self) -> Tuple[date, ...]:
        return self.group.dates


class UserProfile(FrozenEntity):
    """用户属性（用于按用户区分的午餐排期）"""
    open_id: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)


class GroupLabel(FrozenEntity):
    """展示层使用的周期描述"""
    ordinal: int
    date_label: str = Field(..., description="例如 Mon 10/5 或 10/5 to 10/9")
    cutoff_label: str = Field(..., description="例如 orders close Sun 10/4 12:00")


class ScheduleView(FrozenEntity):
    """一次完整排期计算的结果"""
    window_start: date
    window_end: date
    boundary_date: date = Field(..., description="早于该日期的订单已过期")
    groups: Tuple[ReconciledGroup, ...] = Field(default_factory=tuple)
    orderable: Tuple[ReconciledGroup, ...] = Field(default_factory=tuple, description="可新建订单的周期")
    labels: Tuple[GroupLabel, ...] = Field(default_factory=tuple)
