"""
按能力划分的Provider抽象：图片生成/编辑、视频长任务、文本与多模态理解
"""

from .image_gen import BaseImageGenProvider
from .text import BaseTextProvider
from .video_gen import BaseVideoGenProvider

__all__ = ["BaseImageGenProvider", "BaseTextProvider", "BaseVideoGenProvider"]
