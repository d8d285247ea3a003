"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

单元测试不依赖外部服务：Provider调用全部通过mock替换，等待函数被记录而不真正休眠
"""

import io
import os

# 必须在导入app之前设置，避免测试写日志文件或读取真实凭证
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("GEMINI_API_KEY", "test-api-key")

import pytest
from PIL import Image

from app.core.ai.models import MediaInput, Persona, PersonaExample
from app.core.ai.retry import RetryOrchestrator, RetryPolicy
from tests.utils import SleepRecorder


def _encode_image(fmt: str, color=(200, 30, 30)) -> bytes:
    buffered = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffered, format=fmt)
    return buffered.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """一张合法的PNG图片"""
    return _encode_image("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """一张合法的JPEG图片"""
    return _encode_image("JPEG")


@pytest.fixture
def sample_image(png_bytes) -> MediaInput:
    """PNG格式的媒体输入"""
    return MediaInput(data=png_bytes, mime_type="image/png")


@pytest.fixture
def make_persona():
    """角色工厂，按需覆盖字段"""

    def _make(**overrides) -> Persona:
        fields = {
            "id": "persona-1",
            "name": "Nova",
            "instruction": "You are Nova, a cheerful space pilot.",
            "consistency_context": "short silver hair, green flight jacket, cel-shaded anime style",
            "examples": (
                PersonaExample(id="ex-1", input="Hi!", output="Hey there, cadet!"),
                PersonaExample(id="ex-2", input="Where to?", output="To the stars!"),
            ),
            "reference_images": (),
            "last_modified": 1700000000.0,
        }
        fields.update(overrides)
        return Persona(**fields)

    return _make


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """记录等待时长的sleep"""
    return SleepRecorder()


@pytest.fixture
def fast_retry(sleep_recorder) -> RetryOrchestrator:
    """使用默认判定函数、不真正等待的重试编排器"""
    return RetryOrchestrator(policy=RetryPolicy(), sleep=sleep_recorder)


# 测试标记配置
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "logging: 日志相关测试")
    config.addinivalue_line("markers", "retry: 重试编排测试")
    config.addinivalue_line("markers", "router: 模型路由测试")
    config.addinivalue_line("markers", "composer: 角色上下文组装测试")
    config.addinivalue_line("markers", "poller: 长任务轮询测试")
    config.addinivalue_line("markers", "structured: 结构化输出测试")
    config.addinivalue_line("markers", "providers: Provider适配测试")
    config.addinivalue_line("markers", "service: 生成服务测试")
    config.addinivalue_line("markers", "api: API接口测试")
    config.addinivalue_line("markers", "integration: 集成测试")
    config.addinivalue_line("markers", "basic: 基础接口测试")
