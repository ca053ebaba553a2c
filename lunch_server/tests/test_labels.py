"""
展示文案测试
"""

from datetime import timedelta

from ..engine.labels import cutoff_label, describe_group
from ..engine.partition import partition
from ..engine.reconcile import reconcile
from ..models.schedule import GroupingMode, GroupingRule, OrderScheduleType
from .helpers import MONDAY, at, weekdays_between


class TestDescribeGroup:
    """周期描述"""
    
    def test_single_day(self, daily_config, weekday_lunch):
        groups = partition((MONDAY,), OrderScheduleType.DAILY)
        item = reconcile((), groups, daily_config, weekday_lunch, at(MONDAY, 9))[0]
        
        label = describe_group(item)
        
        assert label.date_label == "Mon 10/19"
        assert label.cutoff_label == "orders close Mon 10/19 10:00"
    
    def test_multi_day_span(self, custom_config, weekday_lunch):
        groups = partition(
            weekdays_between(MONDAY, 5),
            OrderScheduleType.CUSTOM,
            GroupingRule(mode=GroupingMode.FIXED_SIZE, size=5),
        )
        item = reconcile((), groups, custom_config, weekday_lunch, at(MONDAY - timedelta(days=5), 9))[0]
        
        label = describe_group(item)
        
        assert label.ordinal == 0
        assert label.date_label == "10/19 to 10/23"
        assert label.cutoff_label == "orders close Fri 10/16 12:00"


def test_cutoff_label_minutes():
    assert cutoff_label(at(MONDAY, 9, 5)) == "orders close Mon 10/19 09:05"
