"""
数据库连接和管理模块
DuckDB 作为组织配置和订单快照的外部存储，排期引擎本身不访问数据库
"""

import duckdb
from pathlib import Path
from typing import Optional, Generator
from contextlib import contextmanager
import threading
from fastapi import Request

from .exceptions import DatabaseError
from ..config.settings import settings

# 完整的表结构定义
SCHEMA_SQL = r"""
CREATE SEQUENCE IF NOT EXISTS users_id_seq;
CREATE TABLE IF NOT EXISTS users (
  id INTEGER DEFAULT nextval('users_id_seq') PRIMARY KEY,
  open_id TEXT UNIQUE NOT NULL,
  domain TEXT NOT NULL,
  nickname TEXT,
  attributes_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS app_data (
  domain TEXT NOT NULL,
  name TEXT NOT NULL,
  data_json JSON NOT NULL,
  updated_at TIMESTAMP DEFAULT now(),
  PRIMARY KEY (domain, name)
);

CREATE TABLE IF NOT EXISTS orders (
  order_id TEXT PRIMARY KEY,
  open_id TEXT NOT NULL,
  domain TEXT NOT NULL,
  order_date DATE NOT NULL,
  payload_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(open_id, domain);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  open_id TEXT,
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


class DatabaseManager:
    """数据库管理器，封装所有数据库操作"""
    
    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or self._get_db_path_from_settings()
    
    def _get_db_path_from_settings(self) -> str:
        """从设置中获取数据库路径"""
        db_url = settings.database_url
        if db_url.startswith("duckdb://"):
            return db_url.replace("duckdb://", "")
        return db_url
    
    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接"""
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            try:
                self._connection = duckdb.connect(self.db_path)
            except duckdb.Error as e:
                raise DatabaseError(f"Failed to open database: {e}")
            self._init_schema()
        return self._connection
    
    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接 - 保持向后兼容"""
        return self.connection
    
    def _init_schema(self):
        """初始化数据库表结构"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except duckdb.Error as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")
    
    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """数据库事务上下文管理器"""
        with self._lock:
            conn = self.connection
            try:
                conn.execute("BEGIN")
                yield conn
                conn.execute("COMMIT")
            except Exception as e:
                try:
                    conn.execute("ROLLBACK")
                except duckdb.Error:
                    pass  # 事务可能已经被 DuckDB 自动终止
                if isinstance(e, DatabaseError):
                    raise
                raise DatabaseError(f"数据库操作失败: {str(e)}")
    
    def init_database(self):
        """初始化数据库"""
        self.get_connection()
    
    def execute_query(self, query: str, params: list = None) -> list:
        """执行查询并返回结果"""
        try:
            con = self.get_connection()
            if params:
                return con.execute(query, params).fetchall()
            return con.execute(query).fetchall()
        except duckdb.Error as e:
            raise DatabaseError(f"Query execution failed: {e}")
    
    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """执行查询并返回单条结果"""
        try:
            con = self.get_connection()
            if params:
                return con.execute(query, params).fetchone()
            return con.execute(query).fetchone()
        except duckdb.Error as e:
            raise DatabaseError(f"Query execution failed: {e}")
    
    def close(self):
        """关闭连接"""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


# 全局数据库管理器实例
db_manager = DatabaseManager()


def get_db(request: Request) -> DatabaseManager:
    """FastAPI 依赖：返回应用绑定的数据库管理器"""
    return getattr(request.app.state, "db", db_manager)
