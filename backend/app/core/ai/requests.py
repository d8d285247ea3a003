"""
能力请求定义
每种能力一个不可变的请求类型，由门面层在单次调用中创建
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .models import (
    ChatTurn,
    ImageAspectRatio,
    ImageQuality,
    MediaInput,
    Persona,
    VideoAspectRatio,
    VideoResolution,
)


@dataclass(frozen=True)
class ImageGenerateRequest:
    """文生图请求"""
    prompt: str
    aspect_ratio: ImageAspectRatio = ImageAspectRatio.SQUARE
    quality: ImageQuality = ImageQuality.NORMAL
    persona: Optional[Persona] = None


@dataclass(frozen=True)
class ImageEditRequest:
    """图片编辑请求"""
    image: MediaInput
    prompt: str
    aspect_ratio: ImageAspectRatio = ImageAspectRatio.SQUARE
    quality: ImageQuality = ImageQuality.NORMAL


@dataclass(frozen=True)
class VideoGenerateRequest:
    """视频生成请求"""
    prompt: str = ""
    resolution: VideoResolution = VideoResolution.HD
    aspect_ratio: VideoAspectRatio = VideoAspectRatio.LANDSCAPE
    persona: Optional[Persona] = None
    start_image: Optional[MediaInput] = None
    reference_images: Tuple[MediaInput, ...] = ()


@dataclass(frozen=True)
class AnalyzeRequest:
    """媒体分析请求"""
    media: MediaInput
    prompt: str = ""


@dataclass(frozen=True)
class ChatRequest:
    """角色对话请求"""
    message: str
    persona: Optional[Persona] = None
    history: Tuple[ChatTurn, ...] = ()


@dataclass(frozen=True)
class OptimizeInstructionRequest:
    """角色指令优化请求"""
    instruction: str


@dataclass(frozen=True)
class DerivePersonaRequest:
    """从参考图提取角色视觉描述请求"""
    images: Tuple[MediaInput, ...]


@dataclass(frozen=True)
class AutoAuthorPersonaRequest:
    """根据名称和描述自动生成角色档案请求"""
    name: str
    description: str
    visual_seed: Optional[str] = None


@dataclass(frozen=True)
class StoryboardPlanRequest:
    """分镜规划请求"""
    story: str


@dataclass(frozen=True)
class StoryboardPanelRequest:
    """单个分镜画面渲染请求"""
    panel: str
    story: str
    persona: Optional[Persona] = None


CapabilityRequest = Union[
    ImageGenerateRequest,
    ImageEditRequest,
    VideoGenerateRequest,
    AnalyzeRequest,
    ChatRequest,
    OptimizeInstructionRequest,
    DerivePersonaRequest,
    AutoAuthorPersonaRequest,
    StoryboardPlanRequest,
    StoryboardPanelRequest,
]

# 使用通用文本/多模态模型的请求类型
TEXT_REQUEST_TYPES = (
    AnalyzeRequest,
    ChatRequest,
    OptimizeInstructionRequest,
    DerivePersonaRequest,
    AutoAuthorPersonaRequest,
    StoryboardPlanRequest,
)
