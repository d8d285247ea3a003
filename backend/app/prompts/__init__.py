"""
Prompt模板管理器
负责加载、渲染和管理所有发给生成模型的提示词模板
"""

import yaml
from typing import Dict, Any, Optional
from pathlib import Path
from jinja2 import Template
from app.core.config import settings
from app.core.log_utils import get_logger

# 获取日志记录器
logger = get_logger(__name__)


class PromptManager:
    """Prompt模板管理器"""

    def __init__(self, prompts_dir: Optional[Path] = None):
        """初始化prompt管理器"""
        self.prompts_dir = prompts_dir or Path(__file__).parent
        self._templates_cache: Dict[str, Dict[str, Any]] = {}
        self._load_all_templates()

    def _load_all_templates(self):
        """加载所有模板文件"""
        for category_dir in self.prompts_dir.iterdir():
            if category_dir.is_dir() and not category_dir.name.startswith('__'):
                category_name = category_dir.name
                self._templates_cache[category_name] = {}

                for template_file in category_dir.glob('*.yml'):
                    with open(template_file, 'r', encoding='utf-8') as f:
                        self._templates_cache[category_name][template_file.stem] = yaml.safe_load(f) or {}

        logger.info(
            "Prompt模板加载完成",
            operation="prompt_templates_loaded",
            categories=list(self._templates_cache.keys())
        )

    def get_template(self, category: str, template_name: str) -> Optional[Dict[str, Any]]:
        """获取指定模板"""
        return self._templates_cache.get(category, {}).get(template_name)

    def _require_template(self, category: str, template_name: str) -> Dict[str, Any]:
        template_data = self.get_template(category, template_name)
        if not template_data:
            raise ValueError(f"模板不存在: {category}/{template_name}")
        return template_data

    def render_system_prompt(self, category: str, template_name: str, **kwargs) -> Optional[str]:
        """渲染系统提示词，模板未定义时返回None"""
        system_prompt = self._require_template(category, template_name).get('system_prompt')
        if not system_prompt:
            return None
        return self._render_template(system_prompt, **kwargs)

    def render_user_prompt(self, category: str, template_name: str, **kwargs) -> str:
        """渲染用户提示词"""
        user_prompt = self._require_template(category, template_name).get('user_prompt', '')
        if not user_prompt:
            raise ValueError(f"模板中未找到user_prompt: {category}/{template_name}")

        return self._render_template(user_prompt, **kwargs)

    def get_template_config(self, category: str, template_name: str) -> Dict[str, Any]:
        """获取模板配置信息"""
        template_data = self.get_template(category, template_name)
        if not template_data:
            return {}

        return {
            'temperature': template_data.get('temperature', settings.ai_default_temperature),
            'max_tokens': template_data.get('max_tokens', settings.ai_default_max_tokens),
            'description': template_data.get('description', ''),
            'version': template_data.get('version', '1.0')
        }

    def _render_template(self, template_str: str, **kwargs) -> str:
        """渲染模板字符串"""
        try:
            return Template(template_str).render(**kwargs).strip()
        except Exception as e:
            logger.error(
                "模板渲染失败",
                exception=e,
                operation="render_template_error",
                template=template_str[:100]
            )
            raise

    def list_templates(self) -> Dict[str, list]:
        """列出所有可用的模板"""
        return {
            category: list(templates.keys())
            for category, templates in self._templates_cache.items()
        }

    def reload_templates(self):
        """重新加载所有模板"""
        self._templates_cache.clear()
        self._load_all_templates()


# 全局prompt管理器实例
prompt_manager = PromptManager()


def get_prompt_manager() -> PromptManager:
    """获取prompt管理器实例"""
    return prompt_manager


from .utils import PromptHelper, PreparedPrompt
