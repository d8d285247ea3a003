"""
文本/多模态能力Provider基类
"""

from abc import abstractmethod
from typing import Any, Optional, Sequence, Set

from app.core.ai.base import BaseAIProvider
from app.core.ai.models import ChatTurn, MediaInput, ModelCapability, ModelSelection


class BaseTextProvider(BaseAIProvider):
    """文本Provider基类，覆盖对话、多模态理解与结构化输出"""

    def get_capabilities(self) -> Set[ModelCapability]:
        """获取支持的能力"""
        return {ModelCapability.CHAT, ModelCapability.VISION, ModelCapability.TEXT}

    @abstractmethod
    async def generate_text(
        self,
        selection: ModelSelection,
        prompt: str,
        media: Sequence[MediaInput] = (),
        system_instruction: Optional[str] = None,
        history: Sequence[ChatTurn] = (),
        response_schema: Optional[Any] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        """
        生成文本

        Args:
            selection: 路由得到的模型与配置
            prompt: 本轮用户输入
            media: 随输入一起发送的图片/视频，位于文本之前
            system_instruction: 系统指令
            history: 之前的对话轮次
            response_schema: 结构化输出约束，提供时要求返回JSON
            temperature: 温度参数
            max_output_tokens: 输出token上限

        Returns:
            模型返回的文本，可能为空字符串
        """
        pass
