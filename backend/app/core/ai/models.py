"""
AI模型交互的数据模型
"""

import base64
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Generic, Mapping, Tuple, TypeVar

T = TypeVar("T")


class ModelCapability(str, Enum):
    """模型能力枚举"""
    CHAT = "chat"
    VISION = "vision"
    TEXT = "text"
    IMAGE_GEN = "image_gen"
    IMAGE_EDIT = "image_edit"
    VIDEO_GEN = "video_gen"


class ImageAspectRatio(str, Enum):
    """图片比例"""
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    WIDE = "16:9"
    TALL = "9:16"


class ImageQuality(str, Enum):
    """图片质量档位"""
    NORMAL = "normal"
    HIGH = "high"


class VideoResolution(str, Enum):
    """视频分辨率"""
    HD = "720p"
    FHD = "1080p"


class VideoAspectRatio(str, Enum):
    """视频比例"""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class VideoMode(str, Enum):
    """视频生成模式"""
    REFERENCE = "reference"
    START_FRAME = "start_frame"
    TEXT = "text"


class OperationState(str, Enum):
    """异步任务状态"""
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class MediaInput:
    """二进制媒体输入（图片或视频）"""
    data: bytes
    mime_type: str = "image/png"

    @classmethod
    def from_base64(cls, encoded: str, mime_type: Optional[str] = None) -> "MediaInput":
        """
        从base64字符串或data URI构建

        Args:
            encoded: 纯base64字符串，或 "data:<mime>;base64,<data>" 格式
            mime_type: MIME类型，data URI中自带类型时可省略
        """
        if encoded.startswith("data:") and "," in encoded:
            header, encoded = encoded.split(",", 1)
            if mime_type is None:
                mime_type = header[5:].split(";", 1)[0] or None
        return cls(data=base64.b64decode(encoded), mime_type=mime_type or "image/png")

    def to_base64(self) -> str:
        """转换为纯base64字符串"""
        return base64.b64encode(self.data).decode()


@dataclass(frozen=True)
class PersonaExample:
    """角色的少样本对话示例"""
    id: str
    input: str
    output: str


@dataclass(frozen=True)
class Persona:
    """
    用户定义的角色档案

    由外部角色存储持有，核心只读取，不修改也不持久化。
    """
    id: str
    name: str
    instruction: str = ""
    consistency_context: Optional[str] = None
    examples: Tuple[PersonaExample, ...] = ()
    reference_images: Tuple[MediaInput, ...] = ()
    last_modified: float = 0.0
    avatar: Optional[str] = None


@dataclass(frozen=True)
class ChatTurn:
    """对话历史中的一轮"""
    role: str
    text: str


@dataclass(frozen=True)
class ModelSelection:
    """模型路由结果，每次请求重新生成"""
    model: str
    capability: ModelCapability
    config: Mapping[str, Any] = field(default_factory=dict)
    video_mode: Optional[VideoMode] = None
    prompt: Optional[str] = None


@dataclass
class OperationHandle:
    """服务端长任务句柄"""
    name: str
    done: bool = False
    artifact_uri: Optional[str] = None
    error: Optional[Any] = None
    raw: Any = None


@dataclass(frozen=True)
class StructuredResult(Generic[T]):
    """结构化输出结果，总是携带一个可用值"""
    value: T
    is_fallback: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class PersonaProfile:
    """自动生成的角色档案"""
    instruction: str
    consistency_context: str
    examples: Tuple[PersonaExample, ...] = ()


@dataclass
class ImageGenerationResult:
    """图片生成结果"""
    image_url: str
    model: str
    prompt: str
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class VideoGenerationResult:
    """视频生成结果"""
    video_bytes: bytes
    model: str
    prompt: str
    mime_type: str = "video/mp4"
    source_uri: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def data_uri(self) -> str:
        """以data URI形式返回视频内容"""
        encoded = base64.b64encode(self.video_bytes).decode()
        return f"data:{self.mime_type};base64,{encoded}"
