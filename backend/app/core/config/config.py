"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, field_validator, ConfigDict

from app.utils.config_utils import (
    get_workspace_path, get_config_path, parse_list_config
)


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "Persona Media Studio"
    app_version: str = "1.0.0"
    app_debug: bool = True
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Persona Media Studio API"

    # ==================== Gemini凭证配置 ====================
    # 凭证在每次调用时重新读取，不在进程内缓存
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY", "gemini_api_key"),
    )
    gemini_base_url: Optional[str] = None

    # ==================== 模型路由配置 ====================
    image_fast_model: str = "gemini-2.5-flash-image"
    image_pro_model: str = "gemini-3-pro-image-preview"
    image_pro_size: str = "2K"
    video_fast_model: str = "veo-3.1-fast-generate-preview"
    video_consistency_model: str = "veo-3.1-generate-preview"
    video_reference_resolution: str = "720p"
    video_reference_aspect_ratio: str = "16:9"
    text_model: str = "gemini-2.5-flash"

    # ==================== 重试配置 ====================
    retry_max_retries: int = 20
    retry_initial_delay: float = 1.0
    retry_backoff_factor: float = 1.5
    retry_max_delay: float = 10.0
    retry_error_markers: str = (
        '["429", "503", "quota", "limit", "QuotaExceeded", '
        '"RESOURCE_EXHAUSTED", "UNAVAILABLE"]'
    )

    # ==================== 视频任务轮询配置 ====================
    video_poll_interval: float = 5.0
    # None 表示不设整体上限，一直轮询到服务端报告完成
    video_poll_timeout: Optional[float] = None
    video_download_timeout: float = 120.0

    # ==================== 角色一致性配置 ====================
    persona_descriptor_min_length: int = 5
    persona_max_reference_images: int = 4
    video_max_reference_images: int = 3

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_dir: str = "log"
    log_file: str = "backend.log"
    log_to_file: bool = True
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== AI模型默认配置 ====================
    ai_default_temperature: float = 0.7
    ai_default_max_tokens: int = 8192

    # ==================== CORS配置 ====================
    cors_origins: str = '["*"]'

    # ==================== 验证器 ====================
    @field_validator("retry_error_markers")
    @classmethod
    def parse_retry_error_markers(cls, value: str) -> List[str]:
        """解析可重试错误关键字配置"""
        return parse_list_config(value)

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_list_config(value)

    # ==================== 计算属性 ====================
    @property
    def workspace_dir(self) -> str:
        """获取workspace目录路径"""
        return str(get_workspace_path())

    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(get_workspace_path(self.log_dir))

    @property
    def absolute_log_file(self) -> str:
        """获取绝对日志文件路径"""
        return str(get_workspace_path(self.log_dir) / self.log_file)

    model_config = ConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        validate_default=True,
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    # 环境变量文件加载由外部环境控制（Docker Compose、launch.json等）
    # 这里只返回配置实例，不主动加载环境文件
    return Settings()


# 全局配置实例
settings = get_settings()
