"""
AI Provider统一抽象基类
Provider只持有客户端工厂，不持有客户端本身，凭证在每次调用时解析
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Callable, Set, TYPE_CHECKING

from .models import ModelCapability

if TYPE_CHECKING:
    from app.core.ai.providers.genai.client import GenAIClientFactory


class BaseAIProvider(ABC):
    """所有AI Provider的统一抽象基类"""

    def __init__(self, client_factory: 'GenAIClientFactory'):
        self.client_factory = client_factory

    @abstractmethod
    def get_capabilities(self) -> Set[ModelCapability]:
        """Provider支持的能力集合"""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Provider名称，对应工厂中的登记名（如 "genai"）"""

    def supports_capability(self, capability: ModelCapability) -> bool:
        return capability in self.get_capabilities()

    def new_client(self):
        """为本次调用创建SDK客户端，缺少凭证时抛出 CredentialsMissingError"""
        return self.client_factory.create()

    async def _run_blocking(self, func: Callable[..., Any], **kwargs: Any) -> Any:
        """同步SDK调用放入线程池执行，不阻塞事件循环"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))
