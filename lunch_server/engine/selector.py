"""
用户午餐排期选择
"""

import logging
from typing import Mapping, Union

from ..core.exceptions import UnresolvedUserScheduleError
from ..models.order import UserProfile
from ..models.schedule import LunchScheduleConfig

logger = logging.getLogger(__name__)


def resolve_for_user(
    lunch_config: LunchScheduleConfig,
    user: Union[UserProfile, Mapping[str, str]]
) -> LunchScheduleConfig:
    """
    解析用户实际适用的午餐排期
    
    非按用户区分的配置原样返回；按用户区分的配置用 lunch_config.key
    对应的用户属性值选择子配置。找不到分支时直接报错，不回退到默认配置，
    给用户展示错误的午餐日属于正确性问题。
    
    Raises:
        UnresolvedUserScheduleError: 用户缺少该属性或属性值没有对应的子配置
    """
    if not lunch_config.dependent:
        return lunch_config
    
    attributes = user.attributes if isinstance(user, UserProfile) else dict(user)
    value = attributes.get(lunch_config.key)
    sub_config = lunch_config.schedules.get(value) if value is not None else None
    
    if sub_config is None:
        logger.warning("用户 %s=%r 没有对应的午餐排期", lunch_config.key, value)
        raise UnresolvedUserScheduleError(
            f"用户属性 {lunch_config.key}={value!r} 没有对应的午餐排期",
            details={"key": lunch_config.key, "value": value,
                     "available": sorted(lunch_config.schedules)}
        )
    return sub_config
