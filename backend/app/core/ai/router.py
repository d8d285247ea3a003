"""
模型路由
根据能力请求及其参数选择具体的模型与配置，不执行任何调用
"""

from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from .models import (
    ImageAspectRatio,
    ImageQuality,
    ModelCapability,
    ModelSelection,
    VideoMode,
)
from .requests import (
    AnalyzeRequest,
    CapabilityRequest,
    ChatRequest,
    DerivePersonaRequest,
    ImageEditRequest,
    ImageGenerateRequest,
    StoryboardPanelRequest,
    TEXT_REQUEST_TYPES,
    VideoGenerateRequest,
)

DEFAULT_START_FRAME_PROMPT = "Animate this image"
DEFAULT_VIDEO_PROMPT = "A cinematic video"


@dataclass(frozen=True)
class ModelCatalog:
    """可路由的模型清单"""
    image_fast: str
    image_pro: str
    image_pro_size: str
    video_fast: str
    video_consistency: str
    video_reference_resolution: str
    video_reference_aspect_ratio: str
    text: str

    @classmethod
    def from_settings(cls) -> "ModelCatalog":
        """从应用配置构建"""
        return cls(
            image_fast=settings.image_fast_model,
            image_pro=settings.image_pro_model,
            image_pro_size=settings.image_pro_size,
            video_fast=settings.video_fast_model,
            video_consistency=settings.video_consistency_model,
            video_reference_resolution=settings.video_reference_resolution,
            video_reference_aspect_ratio=settings.video_reference_aspect_ratio,
            text=settings.text_model,
        )


class ModelRouter:
    """模型路由器（纯函数，无I/O）"""

    def __init__(self, catalog: Optional[ModelCatalog] = None):
        self.catalog = catalog or ModelCatalog.from_settings()

    def route(self, request: CapabilityRequest) -> ModelSelection:
        """
        为请求选择模型与配置

        Args:
            request: 能力请求

        Returns:
            ModelSelection: 模型ID及能力相关配置

        Raises:
            TypeError: 未知的请求类型
        """
        if isinstance(request, ImageGenerateRequest):
            return self._route_image(ModelCapability.IMAGE_GEN, request.quality, request.aspect_ratio)
        if isinstance(request, ImageEditRequest):
            return self._route_image(ModelCapability.IMAGE_EDIT, request.quality, request.aspect_ratio)
        if isinstance(request, StoryboardPanelRequest):
            return self._route_image(ModelCapability.IMAGE_GEN, ImageQuality.NORMAL, ImageAspectRatio.WIDE)
        if isinstance(request, VideoGenerateRequest):
            return self._route_video(request)
        if isinstance(request, TEXT_REQUEST_TYPES):
            return self._route_text(request)
        raise TypeError(f"不支持的请求类型: {type(request).__name__}")

    def _route_image(
        self,
        capability: ModelCapability,
        quality: ImageQuality,
        aspect_ratio: ImageAspectRatio,
    ) -> ModelSelection:
        # 比例在任何档位下都必须携带
        config = {"aspect_ratio": ImageAspectRatio(aspect_ratio).value}
        if quality == ImageQuality.HIGH:
            config["image_size"] = self.catalog.image_pro_size
            model = self.catalog.image_pro
        else:
            model = self.catalog.image_fast
        return ModelSelection(model=model, capability=capability, config=config)

    def _route_video(self, request: VideoGenerateRequest) -> ModelSelection:
        config = {"number_of_videos": 1}

        if request.reference_images:
            # 参考图模式下服务端只接受固定的分辨率与比例
            config["resolution"] = self.catalog.video_reference_resolution
            config["aspect_ratio"] = self.catalog.video_reference_aspect_ratio
            model = self.catalog.video_consistency
            mode = VideoMode.REFERENCE
        else:
            config["resolution"] = request.resolution.value
            config["aspect_ratio"] = request.aspect_ratio.value
            model = self.catalog.video_fast
            mode = VideoMode.START_FRAME if request.start_image is not None else VideoMode.TEXT

        prompt = request.prompt.strip()
        if not prompt:
            prompt = DEFAULT_START_FRAME_PROMPT if request.start_image is not None else DEFAULT_VIDEO_PROMPT

        return ModelSelection(
            model=model,
            capability=ModelCapability.VIDEO_GEN,
            config=config,
            video_mode=mode,
            prompt=prompt,
        )

    def _route_text(self, request) -> ModelSelection:
        if isinstance(request, (AnalyzeRequest, DerivePersonaRequest)):
            capability = ModelCapability.VISION
        elif isinstance(request, ChatRequest):
            capability = ModelCapability.CHAT
        else:
            capability = ModelCapability.TEXT
        return ModelSelection(model=self.catalog.text, capability=capability)
