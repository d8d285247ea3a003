"""
图片生成/编辑能力Provider基类
"""

from abc import abstractmethod
from typing import Sequence, Set

from app.core.ai.base import BaseAIProvider
from app.core.ai.models import ImageGenerationResult, MediaInput, ModelCapability, ModelSelection


class BaseImageGenProvider(BaseAIProvider):
    """图片Provider基类"""

    def get_capabilities(self) -> Set[ModelCapability]:
        """获取支持的能力"""
        return {ModelCapability.IMAGE_GEN, ModelCapability.IMAGE_EDIT}

    @abstractmethod
    async def generate_image(
        self,
        selection: ModelSelection,
        prompt: str,
        images: Sequence[MediaInput] = (),
    ) -> ImageGenerationResult:
        """
        生成或编辑图片

        Args:
            selection: 路由得到的模型与配置
            prompt: 图片描述提示词
            images: 输入图片，编辑时为待编辑的原图

        Returns:
            ImageGenerationResult: 图片生成结果

        Raises:
            MissingArtifactError: 响应中没有图片
        """
        pass
