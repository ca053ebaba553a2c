"""
Business logic services.
Wraps the scheduling engine and its storage collaborators.
"""

from .schedule_service import ScheduleService
from .repositories import ConfigRepository, OrderRepository, UserRepository, parse_config

__all__ = [
    "ScheduleService",
    "ConfigRepository",
    "OrderRepository",
    "UserRepository",
    "parse_config",
]
