"""
通用工具模块包
"""

from .config_utils import (
    PROJECT_ROOT,
    get_workspace_path,
    get_config_path,
    parse_list_config,
    ensure_directory_exists
)
from .json_utils import ResponseParser

__all__ = [
    'PROJECT_ROOT', 'get_workspace_path', 'get_config_path',
    'parse_list_config', 'ensure_directory_exists',
    'ResponseParser',
]
