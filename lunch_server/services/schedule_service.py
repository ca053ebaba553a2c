"""
排期服务模块
串联排期引擎：用户排期选择 -> 日历解析 -> 周期分组 -> 订单对账

业务规则：
- 每次调用都完整重新计算，不缓存、不做增量更新
- 当前时间由调用方传入，服务本身不读取时钟
- 订餐窗口默认从今天和截止边界日期中较早的一天开始，到今天之后 window_days 天结束；
  截止边界早于今天时（正的截止偏移），仍可修改的订单也在窗口内
- 若快照里有更晚的订单，窗口延伸到该订单日期，保证订单都能展示
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Tuple, Union

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import InvalidRangeError
from ..engine import (
    cutoff_boundary_date,
    describe_group,
    orderable_groups,
    reconcile,
    resolve_for_user,
    window_groups,
)
from ..engine.cutoff import localize
from ..models.order import OrderRecord, ScheduleView, UserProfile
from ..models.schedule import LunchScheduleConfig, OrderScheduleConfig
from .repositories import ConfigRepository, OrderRepository, UserRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """排期服务类"""
    
    def __init__(self, db: DatabaseManager = None):
        self.db = db or db_manager
    
    @staticmethod
    def resolve_window(
        order_config: OrderScheduleConfig,
        now: datetime,
        snapshot: Iterable[OrderRecord] = (),
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> Tuple[date, date]:
        """计算订餐窗口 [start, end]"""
        today = localize(now, order_config).date()
        if start is None:
            start = min(today, cutoff_boundary_date(order_config, now))
        if end is None:
            end = max(start, today) + timedelta(days=order_config.window_days)
            latest = max((record.last_date for record in snapshot), default=None)
            if latest and latest > end:
                end = latest
        if start > end:
            raise InvalidRangeError(
                f"起始日期 {start} 晚于结束日期 {end}",
                details={"start": start.isoformat(), "end": end.isoformat()}
            )
        return start, end
    
    def build_schedule(
        self,
        order_config: OrderScheduleConfig,
        lunch_config: LunchScheduleConfig,
        user: Union[UserProfile, Mapping[str, str]],
        snapshot: Iterable[OrderRecord],
        now: datetime,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> ScheduleView:
        """
        计算用户的完整排期
        
        Args:
            order_config: 订餐排期配置
            lunch_config: 午餐排期配置（可以是按用户区分的）
            user: 用户属性
            snapshot: 订单快照
            now: 当前时间
            start: 窗口起始日期，默认今天与截止边界日期中较早的一天
            end: 窗口结束日期，默认今天之后 window_days 天
            
        Returns:
            ScheduleView: 对账后的周期、可下单周期和展示文案
            
        Raises:
            UnresolvedUserScheduleError: 用户没有对应的午餐排期
            InvalidRangeError: 窗口非法
        """
        snapshot = tuple(snapshot)
        user_lunch = resolve_for_user(lunch_config, user)
        window_start, window_end = self.resolve_window(order_config, now, snapshot, start, end)
        
        groups = window_groups(order_config, user_lunch, window_start, window_end)
        reconciled = reconcile(snapshot, groups, order_config, user_lunch, now)
        
        logger.debug(
            "排期计算完成: 窗口 %s~%s, %d 个周期, %d 条订单",
            window_start, window_end, len(reconciled), len(snapshot)
        )
        return ScheduleView(
            window_start=window_start,
            window_end=window_end,
            boundary_date=cutoff_boundary_date(order_config, now),
            groups=reconciled,
            orderable=orderable_groups(reconciled),
            labels=tuple(describe_group(item) for item in reconciled),
        )
    
    def get_user_schedule(
        self,
        open_id: str,
        now: datetime,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> ScheduleView:
        """从存储读取用户所在组织的配置和订单快照后计算排期"""
        users = UserRepository(self.db)
        domain = users.get_domain(open_id)
        profile = users.get_profile(open_id)
        order_config, lunch_config = ConfigRepository(self.db).load(domain)
        snapshot = OrderRepository(self.db).snapshot(open_id, domain)
        return self.build_schedule(order_config, lunch_config, profile, snapshot, now, start, end)
    
    def load_configs(self, open_id: str) -> Tuple[OrderScheduleConfig, LunchScheduleConfig]:
        """用户所在组织的排期配置"""
        domain = UserRepository(self.db).get_domain(open_id)
        return ConfigRepository(self.db).load(domain)
