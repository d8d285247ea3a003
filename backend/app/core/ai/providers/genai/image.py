"""
Google GenAI (Gemini) 图片生成提供商
基于 Google GenAI SDK 实现
支持文生图与基于输入图片的编辑
"""

import base64
import io
from typing import Sequence

from google.genai import types
from PIL import Image

from app.core.ai.exceptions import MissingArtifactError
from app.core.ai.models import ImageGenerationResult, MediaInput, ModelSelection
from app.core.ai.providers.base.image_gen import BaseImageGenProvider
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class GenAIImageProvider(BaseImageGenProvider):
    """Google GenAI 图片生成提供商"""

    def get_provider_name(self) -> str:
        """获取Provider名称"""
        return "genai"

    @staticmethod
    def _build_config(selection: ModelSelection) -> types.GenerateContentConfig:
        image_config = {"aspect_ratio": selection.config["aspect_ratio"]}
        if selection.config.get("image_size"):
            image_config["image_size"] = selection.config["image_size"]

        return types.GenerateContentConfig(
            response_modalities=['TEXT', 'IMAGE'],
            image_config=types.ImageConfig(**image_config),
        )

    @staticmethod
    def _to_png_base64(data: bytes, mime_type: str) -> str:
        """将图片数据转换为PNG的base64编码"""
        if mime_type == "image/png":
            return base64.b64encode(data).decode()

        image = Image.open(io.BytesIO(data))
        buffered = io.BytesIO()
        image.save(buffered, format="PNG")
        return base64.b64encode(buffered.getvalue()).decode()

    async def generate_image(
        self,
        selection: ModelSelection,
        prompt: str,
        images: Sequence[MediaInput] = (),
    ) -> ImageGenerationResult:
        """
        生成图片

        Args:
            selection: 路由结果，config中包含 aspect_ratio 与可选的 image_size
            prompt: 图片生成提示词
            images: 输入图片，放在提示词之前

        Returns:
            ImageGenerationResult: 以 data:image/png;base64 形式返回的图片
        """
        # 输入图片在前，提示词在后
        contents = [
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type)
            for image in images
        ]
        contents.append(types.Part.from_text(text=prompt))

        logger.info(
            "调用GenAI API生成图片",
            operation="genai_generate_start",
            model=selection.model,
            prompt_length=len(prompt),
            input_images_count=len(images),
            aspect_ratio=selection.config.get("aspect_ratio"),
            image_size=selection.config.get("image_size")
        )

        client = self.new_client()
        response = await self._run_blocking(
            client.models.generate_content,
            model=selection.model,
            contents=contents,
            config=self._build_config(selection)
        )

        for part in response.parts or []:
            # 跳过文本部分
            if part.text:
                continue

            if part.inline_data and part.inline_data.data:
                img_base64 = self._to_png_base64(
                    part.inline_data.data,
                    part.inline_data.mime_type or "image/png"
                )
                logger.info("图片生成成功", operation="genai_image_success", model=selection.model)

                return ImageGenerationResult(
                    image_url=f"data:image/png;base64,{img_base64}",
                    model=selection.model,
                    prompt=prompt,
                    metadata=dict(selection.config)
                )

        raise MissingArtifactError(
            "响应中未包含图片数据",
            details={"model": selection.model}
        )
