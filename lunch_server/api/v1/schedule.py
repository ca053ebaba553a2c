"""
排期路由模块
"""

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.database import DatabaseManager, get_db
from ...core.error_handler import create_success_response
from ...core.security import get_open_id
from ...engine import cutoff_instant, cutoff_label
from ...engine.cutoff import localize
from ...schemas.common import ErrorResponse
from ...models.schedule import LunchScheduleConfig, OrderScheduleConfig
from ...schemas.schedule import CutoffResponse, SchedulePreviewRequest
from ...services.repositories import LUNCH_SCHEDULE, ORDER_SCHEDULE, parse_config
from ...services.schedule_service import ScheduleService

router = APIRouter(
    responses={
        404: {"model": ErrorResponse, "description": "用户或组织配置不存在"},
        409: {"model": ErrorResponse, "description": "组织配置错误或用户没有对应的午餐排期"},
    }
)


def get_now() -> datetime:
    """当前时间，测试中通过 dependency_overrides 固定"""
    return datetime.now(timezone.utc)


def get_schedule_service(db: DatabaseManager = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


@router.get("")
def get_schedule(
    start: Optional[date] = Query(None, description="窗口起始日期"),
    end: Optional[date] = Query(None, description="窗口结束日期"),
    open_id: str = Depends(get_open_id),
    now: datetime = Depends(get_now),
    service: ScheduleService = Depends(get_schedule_service)
):
    """当前用户的订餐周期、下单情况和可编辑状态"""
    view = service.get_user_schedule(open_id, now, start, end)
    return create_success_response(view.model_dump(mode="json"))


@router.get("/orderable")
def get_orderable_groups(
    open_id: str = Depends(get_open_id),
    now: datetime = Depends(get_now),
    service: ScheduleService = Depends(get_schedule_service)
):
    """可以新建订单的周期"""
    view = service.get_user_schedule(open_id, now)
    return create_success_response([item.model_dump(mode="json") for item in view.orderable])


@router.get("/cutoff")
def get_cutoff(
    day: date = Query(..., alias="date", description="参考日期"),
    open_id: str = Depends(get_open_id),
    now: datetime = Depends(get_now),
    service: ScheduleService = Depends(get_schedule_service)
):
    """参考日期的截止时刻，用于展示"截止于 ..."文案"""
    order_config, _ = service.load_configs(open_id)
    cutoff_at = cutoff_instant(order_config, day)
    response = CutoffResponse(
        reference_date=day,
        cutoff_at=cutoff_at,
        label=cutoff_label(cutoff_at),
        is_open=localize(now, order_config) < cutoff_at,
    )
    return create_success_response(response.model_dump(mode="json"))


@router.post("/preview")
def preview_schedule(
    req: SchedulePreviewRequest,
    open_id: str = Depends(get_open_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """用提交的配置和订单计算排期，不读取也不写入存储"""
    order_config = parse_config(OrderScheduleConfig, req.order_schedule, ORDER_SCHEDULE)
    lunch_config = parse_config(LunchScheduleConfig, req.lunch_schedule, LUNCH_SCHEDULE)
    view = service.build_schedule(
        order_config,
        lunch_config,
        req.user,
        req.orders,
        req.now,
        req.start,
        req.end,
    )
    return create_success_response(view.model_dump(mode="json"))
