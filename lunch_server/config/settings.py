from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./lunch_server/data/lunch.duckdb"
    
    # JWT配置
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 7  # 7天
    
    # 排期默认值（组织配置未指定时使用）
    default_timezone: str = "America/New_York"
    default_window_days: int = 21
    
    # API配置
    api_title: str = "Lunch Order Scheduling API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    
    # 日志
    log_level: str = "INFO"
    
    # 开发模式
    debug: bool = False
    
    class Config:
        env_file = ".env"
        case_sensitive = False

# 全局设置实例
settings = Settings()
