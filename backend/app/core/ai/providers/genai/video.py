"""
Google GenAI (Veo) 视频生成提供商
提交生成任务、查询任务状态并下载生成的视频
"""

from typing import Any, Optional, Sequence

import httpx
from google.genai import types

from app.core.ai.exceptions import MissingArtifactError
from app.core.ai.models import MediaInput, ModelSelection, OperationHandle
from app.core.ai.providers.base.video_gen import BaseVideoGenProvider
from app.core.config import settings
from app.core.log_utils import get_logger

logger = get_logger(__name__)

# 参考图用于锁定角色外观
REFERENCE_TYPE_ASSET = "ASSET"


def to_operation_handle(operation: Any) -> OperationHandle:
    """将SDK返回的任务对象转换为任务句柄"""
    artifact_uri = None
    response = getattr(operation, "response", None)
    generated_videos = getattr(response, "generated_videos", None) or []
    if generated_videos:
        video = getattr(generated_videos[0], "video", None)
        artifact_uri = getattr(video, "uri", None)

    return OperationHandle(
        name=getattr(operation, "name", None) or "",
        done=bool(getattr(operation, "done", False)),
        artifact_uri=artifact_uri,
        error=getattr(operation, "error", None),
        raw=operation,
    )


class GenAIVideoProvider(BaseVideoGenProvider):
    """Google GenAI 视频生成提供商"""

    def __init__(self, client_factory, download_timeout: Optional[float] = None):
        super().__init__(client_factory)
        self.download_timeout = (
            settings.video_download_timeout if download_timeout is None else download_timeout
        )

    def get_provider_name(self) -> str:
        """获取Provider名称"""
        return "genai"

    @staticmethod
    def _to_image(media: MediaInput) -> types.Image:
        return types.Image(image_bytes=media.data, mime_type=media.mime_type)

    def _build_config(
        self,
        selection: ModelSelection,
        reference_images: Sequence[MediaInput],
    ) -> types.GenerateVideosConfig:
        config = dict(selection.config)
        if reference_images:
            config["reference_images"] = [
                types.VideoGenerationReferenceImage(
                    image=self._to_image(image),
                    reference_type=REFERENCE_TYPE_ASSET,
                )
                for image in reference_images
            ]
        return types.GenerateVideosConfig(**config)

    async def submit(
        self,
        selection: ModelSelection,
        prompt: str,
        start_image: Optional[MediaInput] = None,
        reference_images: Sequence[MediaInput] = (),
    ) -> OperationHandle:
        """
        提交视频生成任务

        Args:
            selection: 路由结果，config中包含数量、分辨率与比例
            prompt: 视频提示词
            start_image: 首帧图片，仅在没有参考图时使用
            reference_images: 角色参考图
        """
        kwargs = {
            "model": selection.model,
            "prompt": prompt,
            "config": self._build_config(selection, reference_images),
        }
        if start_image is not None and not reference_images:
            kwargs["image"] = self._to_image(start_image)

        logger.info(
            "调用GenAI API提交视频任务",
            operation="genai_video_submit",
            model=selection.model,
            prompt_length=len(prompt),
            reference_images_count=len(reference_images),
            has_start_image="image" in kwargs
        )

        client = self.new_client()
        operation = await self._run_blocking(client.models.generate_videos, **kwargs)
        return to_operation_handle(operation)

    async def refresh(self, handle: OperationHandle) -> OperationHandle:
        """查询任务最新状态"""
        client = self.new_client()
        operation = await self._run_blocking(client.operations.get, operation=handle.raw)
        return to_operation_handle(operation)

    async def download(self, uri: str) -> bytes:
        """使用同一凭证下载生成的视频"""
        headers = {"x-goog-api-key": self.client_factory.api_key()}

        try:
            async with httpx.AsyncClient(timeout=self.download_timeout, follow_redirects=True) as client:
                response = await client.get(uri, headers=headers)
        except httpx.TransportError as e:
            logger.error(
                "下载生成的视频失败",
                exception=e,
                operation="genai_video_download_failed"
            )
            raise MissingArtifactError(
                f"下载生成的视频失败: {e}",
                details={"uri": uri}
            ) from e

        if not response.is_success:
            logger.error(
                "下载生成的视频失败",
                operation="genai_video_download_failed",
                status_code=response.status_code
            )
            raise MissingArtifactError(
                "下载生成的视频失败",
                details={"status_code": response.status_code}
            )
        return response.content
