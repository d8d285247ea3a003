"""
视频生成能力Provider基类
视频生成是服务端长任务，拆分为提交、查询、下载三步，由轮询器驱动
"""

from abc import abstractmethod
from typing import Optional, Sequence, Set

from app.core.ai.base import BaseAIProvider
from app.core.ai.models import MediaInput, ModelCapability, ModelSelection, OperationHandle


class BaseVideoGenProvider(BaseAIProvider):
    """视频生成Provider基类"""

    def get_capabilities(self) -> Set[ModelCapability]:
        """获取支持的能力"""
        return {ModelCapability.VIDEO_GEN}

    @abstractmethod
    async def submit(
        self,
        selection: ModelSelection,
        prompt: str,
        start_image: Optional[MediaInput] = None,
        reference_images: Sequence[MediaInput] = (),
    ) -> OperationHandle:
        """提交视频生成任务"""
        pass

    @abstractmethod
    async def refresh(self, handle: OperationHandle) -> OperationHandle:
        """查询任务最新状态"""
        pass

    @abstractmethod
    async def download(self, uri: str) -> bytes:
        """
        下载生成的视频

        Raises:
            MissingArtifactError: 下载失败
        """
        pass
