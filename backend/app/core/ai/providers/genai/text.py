"""
Google GenAI (Gemini) 文本提供商
对话、多模态理解与结构化输出共用同一调用
"""

from typing import Any, List, Optional, Sequence

from google.genai import types

from app.core.ai.models import ChatTurn, MediaInput, ModelSelection
from app.core.ai.providers.base.text import BaseTextProvider
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class GenAITextProvider(BaseTextProvider):
    """Google GenAI 文本提供商"""

    def get_provider_name(self) -> str:
        """获取Provider名称"""
        return "genai"

    @staticmethod
    def _build_contents(
        prompt: str,
        media: Sequence[MediaInput],
        history: Sequence[ChatTurn],
    ) -> List[types.Content]:
        contents = [
            types.Content(role=turn.role, parts=[types.Part.from_text(text=turn.text)])
            for turn in history
        ]
        parts = [types.Part.from_bytes(data=item.data, mime_type=item.mime_type) for item in media]
        parts.append(types.Part.from_text(text=prompt))
        contents.append(types.Content(role="user", parts=parts))
        return contents

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
        """调用模型生成文本，返回原始文本"""
        config_data = {}
        if system_instruction:
            config_data["system_instruction"] = system_instruction
        if temperature is not None:
            config_data["temperature"] = temperature
        if max_output_tokens is not None:
            config_data["max_output_tokens"] = max_output_tokens
        if response_schema is not None:
            config_data["response_mime_type"] = "application/json"
            config_data["response_schema"] = response_schema

        logger.info(
            "调用GenAI API生成文本",
            operation="genai_text_start",
            model=selection.model,
            capability=selection.capability.value,
            media_count=len(media),
            history_turns=len(history),
            structured=response_schema is not None
        )

        client = self.new_client()
        response = await self._run_blocking(
            client.models.generate_content,
            model=selection.model,
            contents=self._build_contents(prompt, media, history),
            config=types.GenerateContentConfig(**config_data) if config_data else None
        )
        return response.text or ""
