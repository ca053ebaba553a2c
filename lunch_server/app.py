"""
午餐订餐排期服务 - 主应用入口

主要功能模块：
- 组织级订餐/午餐排期配置
- 订餐周期划分与截止时间计算
- 订单快照对账（已下单周期、可下单周期、可编辑状态）

技术栈：FastAPI + DuckDB + JWT认证
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from .core.database import DatabaseManager, db_manager
from .core.exceptions import BaseApplicationError, DatabaseError
from .core.error_handler import (
    application_error_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from .core.log import setup_logging
from .config.settings import settings
from .api import api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时初始化数据库
    try:
        app.state.db.init_database()
        logger.info("Database initialized successfully")
    except DatabaseError as e:
        # 不要让应用启动失败，允许在运行时重试
        logger.error("Database initialization failed: %s", e.message)
    
    yield
    
    app.state.db.close()


def create_app(db: DatabaseManager = None) -> FastAPI:
    """创建FastAPI应用"""
    setup_logging()
    
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="午餐订餐排期API",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.db = db or db_manager
    
    # 添加中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 在生产环境中应该限制具体域名
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # 注册异常处理器
    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    
    # 注册路由
    app.include_router(api_router, prefix=settings.api_prefix)
    
    # 健康检查
    @app.get("/health")
    async def health_check():
        try:
            app.state.db.execute_one("SELECT 1")
            return {
                "status": "healthy",
                "version": settings.api_version,
                "database": "connected"
            }
        except DatabaseError as e:
            return {
                "status": "unhealthy", 
                "version": settings.api_version,
                "database": f"error: {e.message}"
            }
    
    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": "午餐订餐排期API"
        }
    
    return app

# 应用实例
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
