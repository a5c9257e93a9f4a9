"""应用配置模块"""
from __future__ import annotations

from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 应用配置
    app_name: str = Field(default="Device Enrollment API", description="应用名称")
    app_version: str = Field(default="1.0.0", description="应用版本")
    debug: bool = Field(default=False, description="调试模式")

    # 服务器配置
    host: str = Field(default="0.0.0.0", description="服务器主机")
    port: int = Field(default=3000, description="服务器端口")
    reload: bool = Field(default=False, description="自动重载")

    # 数据库配置
    database_url: str = Field(
        default="sqlite+aiosqlite:///./enrollment.db",
        description="数据库连接URL"
    )
    store_timeout_seconds: float = Field(default=5.0, gt=0, description="存储操作超时时间（秒）")

    # 身份提供方配置
    supabase_url: Optional[str] = Field(default=None, description="身份提供方地址")
    supabase_anon_key: Optional[str] = Field(default=None, description="匿名公钥")
    supabase_service_role_key: Optional[SecretStr] = Field(default=None, description="特权密钥，禁止对外暴露")
    auth_timeout_seconds: float = Field(default=5.0, gt=0, description="令牌校验超时时间（秒）")

    # 注册码配置
    enrollment_ttl_minutes: int = Field(default=15, ge=1, description="注册码有效期（分钟）")
    enrollment_code_length: int = Field(default=8, ge=4, le=32, description="注册码长度")
    enrollment_create_attempts: int = Field(default=3, ge=1, description="注册码冲突重试次数")
    device_name_max_length: int = Field(default=80, description="设备名称最大长度")
    platform_max_length: int = Field(default=20, description="平台名称最大长度")
    default_device_name: str = Field(default="New Device", description="默认设备名称")
    default_platform: str = Field(default="ios", description="默认平台")
    public_base_url: Optional[str] = Field(default=None, description="注册链接的对外基础地址")

    # 维护配置
    maintenance_log_capacity: int = Field(default=25, ge=1, description="维护日志容量")

    # 静态文件
    static_dir: str = Field(default="public", description="静态文件目录")

    # 日志配置
    log_level: str = Field(default="INFO", description="日志级别")
    log_file: Optional[str] = Field(default=None, description="日志文件路径")

    # CORS配置
    cors_origins: list[str] = Field(
        default=["*"],
        description="CORS允许的源"
    )

    @property
    def identity_provider_configured(self) -> bool:
        """身份提供方公开配置是否齐全"""
        return bool(self.supabase_url and self.supabase_anon_key)


# 创建全局配置实例
settings = Settings()
