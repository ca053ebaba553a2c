"""
排期相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from ..models.order import OrderRecord


class SchedulePreviewRequest(BaseModel):
    """排期预览请求：直接提交配置和订单，不读取存储

    配置文档与 app_data 中存储的格式相同，在路由中按配置解析，格式错误时返回 MALFORMED_CONFIG。
    """
    order_schedule: Dict[str, Any] = Field(..., description="订餐排期配置文档")
    lunch_schedule: Dict[str, Any] = Field(..., description="午餐排期配置文档")
    user: Dict[str, str] = Field(default_factory=dict, description="用户属性")
    orders: List[OrderRecord] = Field(default_factory=list, description="订单快照")
    now: datetime = Field(..., description="计算使用的当前时间")
    start: Optional[date] = Field(None, description="窗口起始日期")
    end: Optional[date] = Field(None, description="窗口结束日期")


class CutoffResponse(BaseModel):
    """截止时间响应"""
    reference_date: date = Field(..., description="参考日期")
    cutoff_at: datetime = Field(..., description="截止时刻")
    label: str = Field(..., description="展示文案")
    is_open: bool = Field(..., description="当前是否仍可下单")
