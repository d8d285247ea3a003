"""
配置模块
"""

from app.core.config.config import Settings, settings, get_settings

__all__ = ["Settings", "settings", "get_settings"]
