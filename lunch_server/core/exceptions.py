"""
自定义异常类
提供更精确的错误处理和异常信息

排期引擎相关的异常（ScheduleError 子类）都是配置或调用参数问题，
重复计算会得到同样的失败，因此一律同步抛出、不做重试。
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""
    
    error_code_default: Optional[str] = None
    
    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.error_code_default or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class DatabaseError(BaseApplicationError):
    """数据库相关异常"""
    error_code_default = "DATABASE_ERROR"


class AuthenticationError(BaseApplicationError):
    """认证相关异常"""
    error_code_default = "AUTHENTICATION_REQUIRED"


class ResourceNotFoundError(BaseApplicationError):
    """资源不存在异常"""
    error_code_default = "RESOURCE_NOT_FOUND"


class UserNotFoundError(ResourceNotFoundError):
    """用户不存在"""
    error_code_default = "USER_NOT_FOUND"


class ConfigNotFoundError(ResourceNotFoundError):
    """组织的排期配置不存在"""
    error_code_default = "CONFIG_NOT_FOUND"


class ScheduleError(BaseApplicationError):
    """排期引擎异常基类"""
    pass


class InvalidRangeError(ScheduleError):
    """日期窗口非法（起始日期晚于结束日期）"""
    error_code_default = "INVALID_RANGE"


class UnresolvedUserScheduleError(ScheduleError):
    """按用户属性区分的午餐排期中找不到该用户对应的分支"""
    error_code_default = "UNRESOLVED_USER_SCHEDULE"


class MalformedConfigError(ScheduleError):
    """重复规则或截止规则缺少必要字段"""
    error_code_default = "MALFORMED_CONFIG"
