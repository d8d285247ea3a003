"""
生成相关的Pydantic数据模型
用于图片、视频、分析、对话与角色创作接口的请求和响应验证

图片与视频等二进制内容以 base64 或 data URI 字符串传输。
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.core.ai.models import (
    ImageAspectRatio,
    ImageGenerationResult,
    ImageQuality,
    VideoAspectRatio,
    VideoGenerationResult,
    VideoResolution,
)
from app.schemas.persona import PersonaSchema


# ============================================================================
# 请求模型
# ============================================================================

class PersonaReference(BaseModel):
    """可选的角色引用：按ID从角色库读取，或直接携带完整档案"""
    persona_id: Optional[str] = Field(None, description="角色ID")
    persona: Optional[PersonaSchema] = Field(None, description="完整角色档案（优先于persona_id）")


class ImageGenerateBody(PersonaReference):
    """文生图请求"""
    prompt: str = Field(..., min_length=1, description="图片描述")
    aspect_ratio: ImageAspectRatio = Field(default=ImageAspectRatio.SQUARE, description="图片比例")
    quality: ImageQuality = Field(default=ImageQuality.NORMAL, description="质量档位，high使用高质量模型并输出2K")


class ImageEditBody(BaseModel):
    """图片编辑请求"""
    image: str = Field(..., min_length=1, description="待编辑图片")
    mime_type: Optional[str] = Field(None, description="图片MIME类型，data URI可省略")
    prompt: str = Field(..., min_length=1, description="编辑指令")
    aspect_ratio: ImageAspectRatio = Field(default=ImageAspectRatio.SQUARE, description="图片比例")
    quality: ImageQuality = Field(default=ImageQuality.NORMAL, description="质量档位")


class VideoGenerateBody(PersonaReference):
    """视频生成请求"""
    prompt: str = Field(default="", description="视频描述，可为空")
    resolution: VideoResolution = Field(default=VideoResolution.HD, description="分辨率")
    aspect_ratio: VideoAspectRatio = Field(default=VideoAspectRatio.LANDSCAPE, description="视频比例")
    start_image: Optional[str] = Field(None, description="首帧图片")
    start_image_mime_type: Optional[str] = Field(None, description="首帧图片MIME类型")
    reference_images: List[str] = Field(default_factory=list, description="参考图，最多使用3张")


class AnalyzeBody(BaseModel):
    """媒体分析请求"""
    media: str = Field(..., min_length=1, description="图片或视频")
    mime_type: Optional[str] = Field(None, description="媒体MIME类型，data URI可省略")
    prompt: str = Field(default="", description="分析要求")


class ChatTurnSchema(BaseModel):
    """对话历史中的一轮"""
    role: Literal["user", "model"] = Field(..., description="角色")
    text: str = Field(..., description="内容")


class ChatBody(PersonaReference):
    """角色对话请求"""
    message: str = Field(..., min_length=1, description="本轮消息")
    history: List[ChatTurnSchema] = Field(default_factory=list, description="之前的对话")


class OptimizeInstructionBody(BaseModel):
    """指令优化请求"""
    instruction: str = Field(..., min_length=1, description="原始指令")


class DerivePersonaBody(BaseModel):
    """从参考图提取视觉描述请求"""
    images: List[str] = Field(..., min_length=1, description="参考图")


class AutoAuthorPersonaBody(BaseModel):
    """自动生成角色档案请求"""
    name: str = Field(..., min_length=1, description="角色名称")
    description: str = Field(default="", description="角色描述")
    visual_seed: Optional[str] = Field(None, description="外观提示")


class StoryboardPlanBody(BaseModel):
    """分镜规划请求"""
    story: str = Field(..., min_length=1, description="故事描述")


class StoryboardPanelBody(PersonaReference):
    """分镜画面渲染请求"""
    panel: str = Field(..., min_length=1, description="分镜画面描述")
    story: str = Field(default="", description="故事描述")


class PersonaAvatarBody(PersonaReference):
    """角色头像生成请求，未提供角色时使用名称与描述"""
    name: Optional[str] = Field(None, description="角色名称")
    consistency_context: Optional[str] = Field(None, description="视觉一致性描述")


# ============================================================================
# 响应模型
# ============================================================================

class ImageResultData(BaseModel):
    """图片结果"""
    image_url: str = Field(..., description="data:image/png;base64 形式的图片")
    model: str = Field(..., description="使用的模型")
    prompt: str = Field(..., description="最终发送的提示词")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="模型配置")

    @classmethod
    def from_result(cls, result: ImageGenerationResult) -> "ImageResultData":
        return cls(
            image_url=result.image_url,
            model=result.model,
            prompt=result.prompt,
            metadata=result.metadata or {},
        )


class VideoResultData(BaseModel):
    """视频结果"""
    video_url: str = Field(..., description="data URI 形式的视频")
    model: str = Field(..., description="使用的模型")
    prompt: str = Field(..., description="最终发送的提示词")
    source_uri: Optional[str] = Field(None, description="Provider返回的视频地址")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="模型配置")

    @classmethod
    def from_result(cls, result: VideoGenerationResult) -> "VideoResultData":
        return cls(
            video_url=result.data_uri,
            model=result.model,
            prompt=result.prompt,
            source_uri=result.source_uri,
            metadata=result.metadata or {},
        )


class TextResultData(BaseModel):
    """文本结果"""
    text: str = Field(..., description="模型返回的文本")


class StoryboardPlanData(BaseModel):
    """分镜规划结果"""
    scenes: List[str] = Field(..., description="分镜画面描述")
    is_fallback: bool = Field(default=False, description="是否为解析失败后的默认分镜")


class CredentialStatusData(BaseModel):
    """凭证状态"""
    has_credential: bool = Field(..., description="是否已配置API密钥")
