"""
生成式媒体编排核心
重试、模型路由、角色上下文组装、长任务轮询与结构化输出
"""

from .base import BaseAIProvider
from .composer import ConsistencyContextComposer
from .factory import AIProviderFactory
from .models import ModelCapability, ImageGenerationResult, VideoGenerationResult
from .poller import AsyncOperationPoller
from .registry import register_all_providers
from .retry import RetryOrchestrator, RetryPolicy, make_retry_predicate
from .router import ModelRouter
from .structured import StructuredOutputCoordinator

__all__ = [
    "AIProviderFactory",
    "AsyncOperationPoller",
    "BaseAIProvider",
    "ConsistencyContextComposer",
    "ImageGenerationResult",
    "ModelCapability",
    "ModelRouter",
    "RetryOrchestrator",
    "RetryPolicy",
    "StructuredOutputCoordinator",
    "VideoGenerationResult",
    "make_retry_predicate",
    "register_all_providers",
]
