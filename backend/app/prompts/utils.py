"""
Prompt工具模块
提供Prompt相关的工具函数和辅助类
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.config import settings


@dataclass(frozen=True)
class PreparedPrompt:
    """渲染完成的提示词及其生成参数"""
    user_prompt: str
    system_prompt: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None


class PromptHelper:
    """Prompt辅助工具类"""

    def __init__(self, prompt_manager):
        self.prompt_manager = prompt_manager

    def prepare_prompts(
        self,
        category: str,
        template_name: str,
        user_prompt_params: Optional[Dict[str, Any]] = None,
        system_prompt_params: Optional[Dict[str, Any]] = None
    ) -> PreparedPrompt:
        """
        准备提示词和配置

        Args:
            category: 提示词类别
            template_name: 模板名称
            user_prompt_params: 用户提示词参数
            system_prompt_params: 系统提示词参数

        Returns:
            PreparedPrompt: 渲染后的提示词与温度等配置
        """
        user_prompt = self.prompt_manager.render_user_prompt(
            category, template_name, **(user_prompt_params or {})
        )
        system_prompt = self.prompt_manager.render_system_prompt(
            category, template_name, **(system_prompt_params or {})
        )

        template_config = self.prompt_manager.get_template_config(category, template_name)
        return PreparedPrompt(
            user_prompt=user_prompt,
            system_prompt=system_prompt,
            temperature=template_config.get('temperature', settings.ai_default_temperature),
            max_tokens=template_config.get('max_tokens', settings.ai_default_max_tokens),
        )
