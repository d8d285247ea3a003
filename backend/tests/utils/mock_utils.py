"""
测试专用的 mock 工具和辅助函数
提供常用的 mock 对象，供所有测试使用
"""

from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

from google.genai import errors as genai_errors

from app.core.ai.models import ImageGenerationResult, OperationHandle


class SleepRecorder:
    """记录等待时长的假sleep函数"""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class MockBuilder:
    """Mock对象构建器 - 用于创建常用的mock对象"""

    @staticmethod
    def create_api_error(code: int, message: str = "error", status: str = "") -> genai_errors.APIError:
        """创建与SDK一致的API错误"""
        return genai_errors.APIError(
            code,
            {"error": {"code": code, "message": message, "status": status}}
        )

    @staticmethod
    def create_image_part(data: bytes, mime_type: str = "image/png") -> MagicMock:
        """创建包含图片的响应片段"""
        part = MagicMock()
        part.text = None
        part.inline_data = MagicMock(data=data, mime_type=mime_type)
        return part

    @staticmethod
    def create_text_part(text: str) -> MagicMock:
        """创建文本响应片段"""
        part = MagicMock()
        part.text = text
        part.inline_data = None
        return part

    @staticmethod
    def create_content_response(parts: Optional[List[Any]] = None, text: Optional[str] = None) -> MagicMock:
        """创建 generate_content 的响应"""
        response = MagicMock()
        response.parts = parts
        response.text = text
        return response

    @staticmethod
    def create_video_operation(
        name: str = "operations/video-1",
        done: bool = False,
        uri: Optional[str] = None,
        error: Any = None,
    ) -> MagicMock:
        """创建视频任务对象"""
        operation = MagicMock()
        operation.name = name
        operation.done = done
        operation.error = error
        if uri:
            video = MagicMock()
            video.video.uri = uri
            operation.response.generated_videos = [video]
        else:
            operation.response.generated_videos = []
        return operation

    @staticmethod
    def create_mock_client_factory(client: Optional[MagicMock] = None, api_key: str = "test-api-key") -> MagicMock:
        """创建客户端工厂，每次create返回同一个mock客户端"""
        factory = MagicMock()
        factory.create.return_value = client or MagicMock()
        factory.api_key.return_value = api_key
        factory.credentials.has_selected_credential.return_value = True
        return factory

    @staticmethod
    def create_mock_image_provider(image_url: str = "data:image/png;base64,AAAA") -> MagicMock:
        """创建图片Provider"""
        provider = MagicMock()

        async def _generate(selection, prompt, images=()):
            return ImageGenerationResult(
                image_url=image_url,
                model=selection.model,
                prompt=prompt,
                metadata=dict(selection.config),
            )

        provider.generate_image = AsyncMock(side_effect=_generate)
        return provider

    @staticmethod
    def create_mock_text_provider(text: str = "ok") -> MagicMock:
        """创建文本Provider"""
        provider = MagicMock()
        provider.generate_text = AsyncMock(return_value=text)
        return provider

    @staticmethod
    def create_mock_video_provider(
        states: Optional[List[OperationHandle]] = None,
        video_bytes: bytes = b"video-bytes",
    ) -> MagicMock:
        """
        创建视频Provider

        Args:
            states: refresh依次返回的句柄，默认第一次查询即完成
            video_bytes: download返回的内容
        """
        provider = MagicMock()
        provider.submit = AsyncMock(return_value=OperationHandle(name="operations/video-1"))
        provider.refresh = AsyncMock(side_effect=states or [
            OperationHandle(name="operations/video-1", done=True, artifact_uri="https://files/video-1")
        ])
        provider.download = AsyncMock(return_value=video_bytes)
        return provider
