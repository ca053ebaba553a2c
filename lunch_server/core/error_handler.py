"""
统一错误处理模块
提供标准化的错误响应格式和错误处理中间件

主要功能：
- 统一的错误响应格式
- HTTP状态码映射
- 未知异常记录到日志和 logs 表
"""

import json
import logging
import traceback
from typing import Dict, Any, Optional
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from .exceptions import BaseApplicationError
from .database import get_db

logger = logging.getLogger(__name__)


class ErrorResponse:
    """标准错误响应格式"""
    
    def __init__(self, error_code: str, message: str, 
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status
    
    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
    
    def to_json_response(self) -> JSONResponse:
        """转换为FastAPI JSONResponse"""
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict()
        )


class ErrorHandler:
    """全局错误处理器"""
    
    # 错误代码到HTTP状态码的映射
    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 400,
        "AUTHENTICATION_REQUIRED": 401,
        "RESOURCE_NOT_FOUND": 404,
        "DATABASE_ERROR": 500,
        "INTERNAL_ERROR": 500,
        
        # 排期相关错误
        "INVALID_RANGE": 400,
        # 以下两类属于组织配置问题，由运营侧处理
        "MALFORMED_CONFIG": 409,
        "UNRESOLVED_USER_SCHEDULE": 409,
        
        # 资源相关错误
        "USER_NOT_FOUND": 404,
        "CONFIG_NOT_FOUND": 404,
    }
    
    # 需要提醒运营人员的配置类错误
    OPERATOR_ERROR_CODES = {"MALFORMED_CONFIG", "UNRESOLVED_USER_SCHEDULE", "CONFIG_NOT_FOUND"}
    
    @classmethod
    def handle_application_error(cls, error: BaseApplicationError) -> ErrorResponse:
        """处理应用业务异常"""
        http_status = cls.ERROR_CODE_STATUS_MAP.get(error.error_code, 400)
        if error.error_code in cls.OPERATOR_ERROR_CODES:
            logger.warning("配置问题 %s: %s", error.error_code, error.message)
        
        return ErrorResponse(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
            http_status=http_status
        )
    
    @classmethod
    def handle_http_exception(cls, error: HTTPException) -> ErrorResponse:
        """处理FastAPI HTTP异常"""
        return ErrorResponse(
            error_code="HTTP_ERROR",
            message=str(error.detail),
            details={"status_code": error.status_code},
            http_status=error.status_code
        )
    
    @classmethod
    def handle_validation_error(cls, error: Exception) -> ErrorResponse:
        """处理Pydantic验证错误"""
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="请求参数验证失败",
            details={"validation_errors": str(error)},
            http_status=422
        )
    
    @classmethod
    def handle_unknown_error(cls, error: Exception, db=None) -> ErrorResponse:
        """处理未知异常"""
        error_details = {
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exc()
        }
        
        logger.error("未处理的异常: %s", error_details["message"], exc_info=error)
        if db is not None:
            cls._log_system_error(db, error_details)
        
        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=str(error) or "系统内部错误",
            details={"error_type": type(error).__name__},
            http_status=500
        )
    
    @classmethod
    def _log_system_error(cls, db, error_details: Dict[str, Any]):
        """记录系统错误到数据库"""
        try:
            db.get_connection().execute(
                "INSERT INTO logs(open_id, action, detail_json) VALUES (?,?,?)",
                [None, "system_error", json.dumps(error_details)]
            )
        except Exception:
            # 数据库本身不可用时只保留日志输出
            logger.exception("Failed to log error to database")


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """应用异常处理中间件"""
    return ErrorHandler.handle_application_error(exc).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP异常处理中间件"""
    return ErrorHandler.handle_http_exception(exc).to_json_response()


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """验证异常处理中间件"""
    return ErrorHandler.handle_validation_error(exc).to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理中间件"""
    return ErrorHandler.handle_unknown_error(exc, get_db(request)).to_json_response()


def create_success_response(data: Any = None, message: str = "操作成功") -> Dict[str, Any]:
    """创建标准成功响应"""
    response = {
        "success": True,
        "message": message
    }
    
    if data is not None:
        response["data"] = data
    
    return response
