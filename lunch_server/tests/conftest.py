"""
测试配置文件
提供测试所需的fixtures和配置

所有测试都使用固定时钟；日期取 2026-10-19（周一）所在的两周。
"""

import pytest
from datetime import date, time, timedelta
from fastapi.testclient import TestClient

from ..app import create_app
from ..api.v1.schedule import get_now
from ..core.database import DatabaseManager
from ..core.security import create_access_token
from ..models.schedule import (
    CutoffRule,
    GroupingMode,
    GroupingRule,
    LunchScheduleConfig,
    OrderScheduleConfig,
    OrderScheduleType,
    RecurrenceRule,
)
from ..services.repositories import (
    ConfigRepository,
    LUNCH_SCHEDULE,
    ORDER_SCHEDULE,
    UserRepository,
)

from .helpers import TZ_NAME, WEEKDAYS, at


@pytest.fixture
def daily_config():
    """每天单独下单，当天 10:00 截止"""
    return OrderScheduleConfig(
        schedule_type=OrderScheduleType.DAILY,
        recurrence=RecurrenceRule(days_of_week=WEEKDAYS),
        cutoff=CutoffRule(time_of_day=time(10, 0)),
        timezone=TZ_NAME,
        window_days=14,
    )


@pytest.fixture
def custom_config():
    """多日周期，周期首日前三天中午截止"""
    return OrderScheduleConfig(
        schedule_type=OrderScheduleType.CUSTOM,
        recurrence=RecurrenceRule(days_of_week=WEEKDAYS),
        cutoff=CutoffRule(time_of_day=time(12, 0), offset=timedelta(days=-3)),
        timezone=TZ_NAME,
        window_days=14,
    )


@pytest.fixture
def weekday_lunch():
    """工作日午餐，从 2026-10-05（周一）起每 5 个午餐日一个周期"""
    return LunchScheduleConfig(
        schedule=RecurrenceRule(days_of_week=WEEKDAYS),
        grouping=GroupingRule(mode=GroupingMode.FIXED_SIZE, size=5, anchor=date(2026, 10, 5)),
    )


@pytest.fixture
def site_lunch():
    """按 site 区分的午餐排期"""
    return LunchScheduleConfig(
        dependent=True,
        key="site",
        schedules={
            "siteA": LunchScheduleConfig(
                schedule=RecurrenceRule(days_of_week={1, 3, 5}),
                grouping=GroupingRule(mode=GroupingMode.WEEKLY),
            ),
            "siteB": LunchScheduleConfig(
                schedule=RecurrenceRule(days_of_week={2, 4}),
                grouping=GroupingRule(mode=GroupingMode.WEEKLY),
            ),
        },
    )


@pytest.fixture
def test_db():
    """内存数据库"""
    db = DatabaseManager(":memory:")
    yield db
    db.close()


@pytest.fixture
def seeded_db(test_db, custom_config, site_lunch):
    """写入 acme 组织的配置和两个用户"""
    configs = ConfigRepository(test_db)
    configs.save("acme", ORDER_SCHEDULE, custom_config)
    configs.save("acme", LUNCH_SCHEDULE, site_lunch)
    
    users = UserRepository(test_db)
    users.upsert("user_a", "acme", {"site": "siteA"}, nickname="Alice")
    users.upsert("user_c", "acme", {"site": "siteC"}, nickname="Carol")
    return test_db


@pytest.fixture
def fixed_now():
    """周四上午，下周周期尚未截止"""
    return at(date(2026, 10, 15), 9)


@pytest.fixture
def app_instance(seeded_db, fixed_now):
    """测试应用"""
    app = create_app(db=seeded_db)
    app.dependency_overrides[get_now] = lambda: fixed_now
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_instance):
    """测试客户端"""
    return TestClient(app_instance)


@pytest.fixture
def auth_headers():
    """user_a 的认证请求头"""
    return {"Authorization": f"Bearer {create_access_token('user_a')}"}
