"""
外部存储适配
组织配置、订单快照和用户属性都从 DuckDB 读取，交给排期引擎的只有纯数据
"""

import json
import logging
import uuid
from datetime import date
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union

import pydantic

from ..core.database import DatabaseManager
from ..core.exceptions import ConfigNotFoundError, MalformedConfigError, UserNotFoundError
from ..models.base import ConfigEntity
from ..models.order import OrderRecord, UserProfile
from ..models.schedule import LunchScheduleConfig, OrderScheduleConfig

logger = logging.getLogger(__name__)

ORDER_SCHEDULE = "orderSchedule"
LUNCH_SCHEDULE = "lunchSchedule"

C = TypeVar("C", bound=ConfigEntity)


def _loads(raw) -> Any:
    if raw is None:
        return None
    return json.loads(raw) if isinstance(raw, str) else raw


def parse_config(model: Type[C], data: Dict[str, Any], name: str = None) -> C:
    """解析配置文档，字段缺失或取值非法时转换为 MalformedConfigError"""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise MalformedConfigError(
            f"配置 {name or model.__name__} 格式错误",
            details={"errors": json.loads(e.json(include_url=False))}
        )


class ConfigRepository:
    """组织级排期配置（app_data 表，每个组织一份 orderSchedule 和 lunchSchedule）"""
    
    def __init__(self, db: DatabaseManager):
        self.db = db
    
    def save(self, domain: str, name: str, data: Union[Dict[str, Any], ConfigEntity]) -> None:
        """写入或覆盖一份配置文档"""
        if isinstance(data, ConfigEntity):
            data = data.model_dump(mode="json", by_alias=True)
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO app_data(domain, name, data_json) VALUES (?,?,?)
                ON CONFLICT (domain, name) DO UPDATE SET data_json=excluded.data_json, updated_at=now()
                """,
                [domain, name, json.dumps(data)]
            )
    
    def get_document(self, domain: str, name: str) -> Dict[str, Any]:
        row = self.db.execute_one(
            "SELECT data_json FROM app_data WHERE domain=? AND name=?",
            [domain, name]
        )
        if not row:
            raise ConfigNotFoundError(
                f"组织 {domain} 缺少配置 {name}",
                details={"domain": domain, "name": name}
            )
        return _loads(row[0]) or {}
    
    def load(self, domain: str) -> Tuple[OrderScheduleConfig, LunchScheduleConfig]:
        """
        读取组织的订餐排期和午餐排期
        
        Raises:
            ConfigNotFoundError: 任一配置不存在
            MalformedConfigError: 配置格式错误
        """
        order_config = parse_config(
            OrderScheduleConfig, self.get_document(domain, ORDER_SCHEDULE), ORDER_SCHEDULE)
        lunch_config = parse_config(
            LunchScheduleConfig, self.get_document(domain, LUNCH_SCHEDULE), LUNCH_SCHEDULE)
        logger.debug("已加载组织 %s 的排期配置", domain)
        return order_config, lunch_config


class OrderRepository:
    """订单快照（orders 表，每个日期一行）"""
    
    def __init__(self, db: DatabaseManager):
        self.db = db
    
    def add(self, open_id: str, domain: str, order_date: date,
            payload: Optional[Dict[str, Any]] = None, order_id: str = None) -> str:
        """写入一条订单，返回订单ID"""
        order_id = order_id or uuid.uuid4().hex
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO orders(order_id, open_id, domain, order_date, payload_json) VALUES (?,?,?,?,?)",
                [order_id, open_id, domain, order_date, json.dumps(payload or {})]
            )
        return order_id
    
    def snapshot(self, open_id: str, domain: str) -> Tuple[OrderRecord, ...]:
        """用户在组织内的全部订单"""
        rows = self.db.execute_query(
            """
            SELECT order_id, order_date, payload_json
            FROM orders
            WHERE open_id=? AND domain=?
            ORDER BY order_date, order_id
            """,
            [open_id, domain]
        )
        return tuple(
            OrderRecord(order_id=row[0], dates=(row[1],), payload=_loads(row[2]) or {})
            for row in rows
        )


class UserRepository:
    """用户及其属性"""
    
    def __init__(self, db: DatabaseManager):
        self.db = db
    
    def upsert(self, open_id: str, domain: str, attributes: Dict[str, str] = None,
               nickname: str = None) -> None:
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users(open_id, domain, nickname, attributes_json) VALUES (?,?,?,?)
                ON CONFLICT (open_id) DO UPDATE SET domain=excluded.domain,
                    nickname=excluded.nickname, attributes_json=excluded.attributes_json
                """,
                [open_id, domain, nickname, json.dumps(attributes or {})]
            )
    
    def get_domain(self, open_id: str) -> str:
        row = self.db.execute_one("SELECT domain FROM users WHERE open_id=?", [open_id])
        if not row:
            raise UserNotFoundError("用户不存在", details={"open_id": open_id})
        return row[0]
    
    def get_profile(self, open_id: str) -> UserProfile:
        row = self.db.execute_one("SELECT attributes_json FROM users WHERE open_id=?", [open_id])
        if not row:
            raise UserNotFoundError("用户不存在", details={"open_id": open_id})
        attributes = _loads(row[0]) or {}
        return UserProfile(open_id=open_id, attributes={str(k): str(v) for k, v in attributes.items()})
