"""
配置工具模块
配置文件与运行时目录的路径计算、列表型环境变量解析
"""

import json
import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

# backend/app/utils/config_utils.py -> 项目根目录
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_workspace_path(sub_path: str = "") -> Path:
    """运行时产物目录（日志等），sub_path为空时返回目录本身"""
    return PROJECT_ROOT / "workspace" / sub_path if sub_path else PROJECT_ROOT / "workspace"


def get_config_path(sub_path: str = "") -> Path:
    """配置目录（.env 所在位置）"""
    return PROJECT_ROOT / "config" / sub_path if sub_path else PROJECT_ROOT / "config"


def parse_list_config(value: Union[str, List[str], None]) -> List[str]:
    """
    解析列表型配置

    支持两种写法:
        JSON数组: '["429", "RESOURCE_EXHAUSTED"]'
        逗号分隔: '429,RESOURCE_EXHAUSTED'
    """
    if not value:
        return []
    if isinstance(value, list):
        return [str(item) for item in value]

    text = value.strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning(f"列表配置不是合法的JSON数组: {value}")
            return []
        return [str(item) for item in parsed]

    return [item.strip() for item in text.split(",") if item.strip()]


def ensure_directory_exists(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
