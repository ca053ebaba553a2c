"""
日志配置
"""

import logging

from ..config.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    """按配置初始化根日志器，重复调用不会重复添加 handler"""
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
