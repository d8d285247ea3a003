"""
AI Provider工厂
按 (能力, Provider名称) 登记Provider类，生成服务按需实例化
"""

from typing import Dict, List, Tuple, Type

from app.core.log_utils import get_logger
from .base import BaseAIProvider
from .models import ModelCapability

logger = get_logger(__name__)

RegistryKey = Tuple[ModelCapability, str]


class AIProviderFactory:
    """AI Provider工厂类"""

    _providers: Dict[RegistryKey, Type[BaseAIProvider]] = {}

    @classmethod
    def register(
        cls,
        capability: ModelCapability,
        provider_name: str,
        provider_class: Type[BaseAIProvider]
    ) -> None:
        """登记Provider类，同名登记会覆盖之前的类"""
        cls._providers[(capability, provider_name)] = provider_class
        logger.debug(
            "注册Provider: {capability}/{provider_name}",
            operation="register_provider",
            capability=capability.value,
            provider_name=provider_name
        )

    @classmethod
    def create(
        cls,
        capability: ModelCapability,
        provider_name: str,
        client_factory
    ) -> BaseAIProvider:
        """
        实例化Provider

        Args:
            capability: 需要的能力
            provider_name: Provider名称
            client_factory: SDK客户端工厂，Provider每次调用都通过它创建客户端

        Raises:
            ValueError: 该能力下没有登记此Provider
        """
        provider_class = cls._providers.get((capability, provider_name))
        if provider_class is None:
            raise ValueError(
                f"未注册的Provider: {capability.value}/{provider_name}, "
                f"可用的Provider: {cls.get_available_providers(capability)}"
            )
        return provider_class(client_factory)

    @classmethod
    def get_available_providers(cls, capability: ModelCapability) -> List[str]:
        """某种能力下已登记的Provider名称"""
        return [name for (cap, name) in cls._providers if cap == capability]

    @classmethod
    def is_registered(cls, capability: ModelCapability, provider_name: str) -> bool:
        return (capability, provider_name) in cls._providers

    @classmethod
    def registered_capabilities(cls) -> List[ModelCapability]:
        """已有Provider的能力列表"""
        return sorted({cap for (cap, _) in cls._providers}, key=lambda cap: cap.value)
