"""
排期服务测试
"""

import pytest
from datetime import date, time, timedelta

from ..core.exceptions import (
    ConfigNotFoundError,
    InvalidRangeError,
    UnresolvedUserScheduleError,
    UserNotFoundError,
)
from ..models.order import OrderRecord, UserProfile
from ..models.schedule import CutoffRule, OrderScheduleConfig, OrderScheduleType, RecurrenceRule
from ..services.repositories import OrderRepository
from ..services.schedule_service import ScheduleService
from .helpers import MONDAY, NEXT_MONDAY, TZ_NAME, WEEKDAYS, at


SITE_A = UserProfile(open_id="user_a", attributes={"site": "siteA"})


class TestBuildSchedule:
    """纯计算流程"""
    
    def test_site_schedule(self, custom_config, site_lunch, fixed_now):
        """siteA 周一三五供应午餐，按周分组"""
        view = ScheduleService().build_schedule(custom_config, site_lunch, SITE_A, (), fixed_now)
        
        assert view.window_start == date(2026, 10, 15)
        assert view.window_end == date(2026, 10, 29)
        assert view.boundary_date == date(2026, 10, 18)
        assert [item.dates for item in view.groups] == [
            (date(2026, 10, 16),),
            (MONDAY, date(2026, 10, 21), date(2026, 10, 23)),
            (NEXT_MONDAY, date(2026, 10, 28)),
        ]
        assert [item.availability_index for item in view.groups] == [-1, 0, 1]
        assert [item.editable for item in view.groups] == [False, True, True]
        assert [item.group.ordinal for item in view.orderable] == [1, 2]
        assert [label.date_label for label in view.labels] == ["Fri 10/16", "10/19 to 10/23", "10/26 to 10/28"]
    
    def test_claimed_group(self, custom_config, site_lunch, fixed_now):
        """下过单的周期被占用，后面的周期序号前移"""
        snapshot = [OrderRecord(order_id="o1", date=date(2026, 10, 21))]
        
        view = ScheduleService().build_schedule(custom_config, site_lunch, SITE_A, snapshot, fixed_now)
        
        assert view.groups[1].order_ids == ("o1",)
        assert [item.availability_index for item in view.groups] == [-1, None, 0]
        assert [item.group.ordinal for item in view.orderable] == [2]
    
    def test_window_extends_to_latest_order(self, custom_config, site_lunch, fixed_now):
        """窗口延伸到快照中最晚的订单"""
        snapshot = [OrderRecord(order_id="late", date=date(2026, 11, 20))]
        
        view = ScheduleService().build_schedule(custom_config, site_lunch, SITE_A, snapshot, fixed_now)
        
        assert view.window_end == date(2026, 11, 20)
        assert view.groups[-1].order_ids == ("late",)
    
    def test_explicit_window(self, custom_config, site_lunch, fixed_now):
        """显式指定窗口"""
        view = ScheduleService().build_schedule(
            custom_config, site_lunch, SITE_A, (), fixed_now, start=MONDAY, end=MONDAY + timedelta(days=4))
        
        assert len(view.groups) == 1
        assert view.groups[0].availability_index == 0
    
    def test_invalid_window(self, custom_config, site_lunch, fixed_now):
        """结束日期早于起始日期"""
        with pytest.raises(InvalidRangeError):
            ScheduleService().build_schedule(
                custom_config, site_lunch, SITE_A, (), fixed_now, start=NEXT_MONDAY, end=MONDAY)
    
    def test_unresolved_user(self, custom_config, site_lunch, fixed_now):
        """用户没有对应的午餐排期"""
        with pytest.raises(UnresolvedUserScheduleError):
            ScheduleService().build_schedule(custom_config, site_lunch, {"site": "siteC"}, (), fixed_now)
    
    def test_daily_schedule(self, daily_config, weekday_lunch, fixed_now):
        """DAILY 排期每个午餐日一个周期"""
        view = ScheduleService().build_schedule(daily_config, weekday_lunch, {}, (), fixed_now)
        
        assert all(len(item.dates) == 1 for item in view.groups)
        assert view.groups[0].dates == (date(2026, 10, 15),)
        assert view.groups[0].editable is True
    
    def test_fixed_size_groups_do_not_move(self, custom_config, weekday_lunch):
        """周一和周三查看，FIXED_SIZE 周期边界相同"""
        service = ScheduleService()
        
        monday = service.build_schedule(custom_config, weekday_lunch, {}, (), at(MONDAY, 13))
        wednesday = service.build_schedule(custom_config, weekday_lunch, {}, (), at(MONDAY + timedelta(days=2), 13))
        
        assert wednesday.groups[0].dates == monday.groups[0].dates == tuple(MONDAY + timedelta(days=i) for i in range(5))
        assert wednesday.groups[1].dates == monday.groups[1].dates
        assert all(item.group.first_date.isoweekday() == 1 for item in wednesday.groups)
    
    def test_open_order_before_today_visible(self, weekday_lunch):
        """截止在次日中午时，昨天的订单仍可修改且在窗口内"""
        config = OrderScheduleConfig(
            schedule_type=OrderScheduleType.DAILY,
            recurrence=RecurrenceRule(days_of_week=WEEKDAYS),
            cutoff=CutoffRule(time_of_day=time(12, 0), offset=timedelta(days=1)),
            timezone=TZ_NAME,
            window_days=7,
        )
        snapshot = [OrderRecord(order_id="mon", date=MONDAY)]
        
        view = ScheduleService().build_schedule(config, weekday_lunch, {}, snapshot, at(MONDAY + timedelta(days=1), 9))
        
        assert view.boundary_date == MONDAY
        assert view.window_start == MONDAY
        assert view.groups[0].order_ids == ("mon",)
        assert view.groups[0].editable is True
        assert view.window_end == MONDAY + timedelta(days=8)


class TestUserSchedule:
    """从存储读取后计算"""
    
    def test_get_user_schedule(self, seeded_db, fixed_now):
        """读取配置、用户属性和订单快照"""
        OrderRepository(seeded_db).add("user_a", "acme", NEXT_MONDAY, {"bread": "rye"}, order_id="o1")
        
        view = ScheduleService(seeded_db).get_user_schedule("user_a", fixed_now)
        
        assert [item.order_ids for item in view.groups] == [(), (), ("o1",)]
    
    def test_other_users_orders_ignored(self, seeded_db, fixed_now):
        """只使用当前用户的订单"""
        OrderRepository(seeded_db).add("someone_else", "acme", NEXT_MONDAY, order_id="o2")
        
        view = ScheduleService(seeded_db).get_user_schedule("user_a", fixed_now)
        
        assert not any(item.claimed for item in view.groups)
    
    def test_unknown_user(self, seeded_db, fixed_now):
        with pytest.raises(UserNotFoundError):
            ScheduleService(seeded_db).get_user_schedule("nobody", fixed_now)
    
    def test_missing_configs(self, test_db, fixed_now):
        """组织没有配置"""
        from ..services.repositories import UserRepository
        UserRepository(test_db).upsert("lonely", "empty_org")
        
        with pytest.raises(ConfigNotFoundError):
            ScheduleService(test_db).get_user_schedule("lonely", fixed_now)
