"""
生成服务异常定义
定义AI生成模块中使用的所有异常类型

Provider 返回的限流/过载错误不在此处包装，重试耗尽后原样向上抛出，
方便调用方检查原始错误信号。
"""

from typing import Any, Dict, Optional


class GenerationError(Exception):
    """
    生成操作基础异常

    Attributes:
        message: 错误消息
        code: 错误码
        details: 错误详情
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class MissingArtifactError(GenerationError):
    """调用成功但没有可用产物（无图片、无视频URI或视频下载失败）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="MISSING_ARTIFACT", details=details)


class OperationFailedError(GenerationError):
    """异步任务在服务端以失败状态结束"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="OPERATION_FAILED", details=details)


class OperationTimeoutError(GenerationError):
    """异步任务轮询超过配置的整体时限"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="OPERATION_TIMEOUT", details=details)


class CredentialNotSelectedError(GenerationError):
    """未配置可用的Provider凭证"""

    def __init__(self, message: str = "未配置Gemini API密钥", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CREDENTIAL_MISSING", details=details)
