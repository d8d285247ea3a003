"""
AI Provider注册中心
应用启动时调用 register_all_providers，把各能力映射到具体Provider类
"""

from app.core.log_utils import get_logger
from .factory import AIProviderFactory
from .models import ModelCapability

logger = get_logger(__name__)

DEFAULT_PROVIDER = "genai"


def register_all_providers():
    """登记 Google GenAI 的图片、视频与文本Provider，重复调用是安全的"""
    from .providers.genai import GenAIImageProvider, GenAITextProvider, GenAIVideoProvider

    capability_map = {
        GenAIImageProvider: (ModelCapability.IMAGE_GEN, ModelCapability.IMAGE_EDIT),
        GenAIVideoProvider: (ModelCapability.VIDEO_GEN,),
        GenAITextProvider: (ModelCapability.TEXT, ModelCapability.CHAT, ModelCapability.VISION),
    }
    for provider_class, capabilities in capability_map.items():
        for capability in capabilities:
            AIProviderFactory.register(capability, DEFAULT_PROVIDER, provider_class)

    logger.info(
        "AI Provider登记完成",
        operation="register_all_providers_complete",
        capabilities=[cap.value for cap in AIProviderFactory.registered_capabilities()]
    )
