"""
安全相关功能
JWT 签发与校验，提供 FastAPI 依赖获取当前用户 open_id
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .exceptions import AuthenticationError
from ..config.settings import settings


class SecurityManager:
    """安全管理器"""
    
    def create_jwt_token(self, open_id: str, additional_claims: Dict[str, Any] = None) -> str:
        """创建JWT token"""
        now = datetime.now(timezone.utc)
        payload = {
            "open_id": open_id,
            "exp": now + timedelta(hours=settings.jwt_expire_hours),
            "iat": now,
        }
        
        if additional_claims:
            payload.update(additional_claims)
        
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    
    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        """解码JWT token"""
        try:
            return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}")
    
    def get_open_id_from_token(self, token: str) -> str:
        """从token中提取open_id"""
        payload = self.decode_jwt_token(token)
        open_id = payload.get("open_id")
        if not open_id:
            raise AuthenticationError("Token missing open_id")
        return open_id


# 全局安全管理器实例
security_manager = SecurityManager()


async def get_open_id(
    credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer())
) -> str:
    """从Authorization header中提取并验证open_id"""
    try:
        return security_manager.get_open_id_from_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)


def create_access_token(open_id: str) -> str:
    """创建访问token"""
    return security_manager.create_jwt_token(open_id)
