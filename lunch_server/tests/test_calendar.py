"""
日历解析测试
"""

import pytest
from datetime import date, timedelta

from ..core.exceptions import InvalidRangeError, MalformedConfigError
from ..engine.calendar import resolve_lunch_dates, resolve_open_dates
from ..models.schedule import LunchScheduleConfig, RecurrenceRule
from .helpers import MONDAY, NEXT_MONDAY, WEEKDAYS, weekdays_between


class TestResolveOpenDates:
    """开放订餐日期"""
    
    def test_weekdays_in_two_weeks(self, daily_config):
        """两周窗口内只包含工作日"""
        result = resolve_open_dates(daily_config, MONDAY, MONDAY + timedelta(days=13))
        
        assert result == weekdays_between(MONDAY, 10)
    
    def test_strictly_increasing_and_within_window(self, daily_config):
        """任意窗口的结果严格递增且落在窗口内"""
        for offset in range(0, 10):
            start = MONDAY + timedelta(days=offset)
            for length in range(0, 12):
                end = start + timedelta(days=length)
                result = resolve_open_dates(daily_config, start, end)
                assert all(a < b for a, b in zip(result, result[1:]))
                assert all(start <= d <= end for d in result)
    
    def test_blackout_dates_excluded(self):
        """停餐日不开放"""
        rule = RecurrenceRule(days_of_week=WEEKDAYS, blackout_dates={MONDAY + timedelta(days=2)})
        
        result = resolve_open_dates(rule, MONDAY, MONDAY + timedelta(days=4))
        
        assert date(2026, 10, 21) not in result
        assert len(result) == 4
    
    def test_rule_bounds_intersect_window(self):
        """规则自身的起止日期与窗口取交集"""
        rule = RecurrenceRule(
            days_of_week=WEEKDAYS,
            start=MONDAY + timedelta(days=1),
            end=NEXT_MONDAY,
        )
        
        result = resolve_open_dates(rule, MONDAY, NEXT_MONDAY + timedelta(days=4))
        
        assert result[0] == date(2026, 10, 20)
        assert result[-1] == NEXT_MONDAY
        assert len(result) == 5
    
    def test_rule_bounds_outside_window(self):
        """规则区间与窗口不相交时为空"""
        rule = RecurrenceRule(days_of_week=WEEKDAYS, start=date(2027, 1, 1))
        
        assert resolve_open_dates(rule, MONDAY, NEXT_MONDAY) == ()
    
    def test_weekend_window_is_empty(self, daily_config):
        """没有匹配日期不是错误"""
        saturday = MONDAY - timedelta(days=2)
        
        assert resolve_open_dates(daily_config, saturday, saturday + timedelta(days=1)) == ()
    
    def test_single_day_window(self, daily_config):
        """起止同一天"""
        assert resolve_open_dates(daily_config, MONDAY, MONDAY) == (MONDAY,)
    
    def test_start_after_end(self, daily_config):
        """起始日期晚于结束日期"""
        with pytest.raises(InvalidRangeError) as exc_info:
            resolve_open_dates(daily_config, NEXT_MONDAY, MONDAY)
        
        assert exc_info.value.error_code == "INVALID_RANGE"


class TestResolveLunchDates:
    """订餐日与午餐日的交集"""
    
    def test_intersection(self, daily_config):
        """只保留同时供应午餐的日期"""
        lunch = LunchScheduleConfig(schedule=RecurrenceRule(days_of_week={1, 3, 5, 6}))
        
        result = resolve_lunch_dates(daily_config, lunch, MONDAY, MONDAY + timedelta(days=6))
        
        # 周六供应午餐但不开放订餐
        assert result == (date(2026, 10, 19), date(2026, 10, 21), date(2026, 10, 23))
    
    def test_dependent_config_must_be_resolved(self, daily_config, site_lunch):
        """按用户区分的午餐排期需要先解析"""
        with pytest.raises(MalformedConfigError):
            resolve_lunch_dates(daily_config, site_lunch, MONDAY, NEXT_MONDAY)
