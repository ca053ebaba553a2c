"""
基础数据模型
定义通用的模型基类
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FrozenEntity(BaseModel):
    """不可变实体，引擎的输入和输出都基于它，计算过程中不会被原地修改"""
    
    model_config = ConfigDict(frozen=True)


class ConfigEntity(FrozenEntity):
    """组织配置实体

    配置存储里的字段沿用 camelCase（scheduleType、daysOfWeek ...），
    这里同时接受 camelCase 和 snake_case。
    """
    
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )
