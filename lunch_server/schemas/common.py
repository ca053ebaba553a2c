from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """错误响应格式"""
    success: bool = Field(False, description="请求失败")
    message: str = Field(description="错误消息")
    error_code: str = Field(description="错误码")
    details: dict = Field(default_factory=dict, description="错误详情")
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "message": "用户属性 site='siteC' 没有对应的午餐排期",
                "error_code": "UNRESOLVED_USER_SCHEDULE",
                "details": {"key": "site", "value": "siteC"}
            }
        }
    }
