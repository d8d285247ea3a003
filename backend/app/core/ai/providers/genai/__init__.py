"""
Google GenAI (Gemini / Veo) 提供商
"""

from .client import GenAIClientFactory
from .image import GenAIImageProvider
from .text import GenAITextProvider
from .video import GenAIVideoProvider

__all__ = [
    "GenAIClientFactory",
    "GenAIImageProvider",
    "GenAITextProvider",
    "GenAIVideoProvider",
]
