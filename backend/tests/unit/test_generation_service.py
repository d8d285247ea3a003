"""
生成服务单元测试
Provider全部替换为mock，覆盖组装、路由、重试与轮询在门面层的组合
"""

import json

import pytest

from app.core.ai.composer import ConsistencyContextComposer
from app.core.ai.exceptions import MissingArtifactError
from app.core.ai.models import (
    ChatTurn,
    ImageAspectRatio,
    ImageQuality,
    MediaInput,
    ModelCapability,
    OperationHandle,
    VideoAspectRatio,
    VideoResolution,
)
from app.core.ai.poller import AsyncOperationPoller
from app.core.ai.requests import (
    AnalyzeRequest,
    AutoAuthorPersonaRequest,
    ChatRequest,
    DerivePersonaRequest,
    ImageEditRequest,
    ImageGenerateRequest,
    OptimizeInstructionRequest,
    StoryboardPanelRequest,
    StoryboardPlanRequest,
    VideoGenerateRequest,
)
from app.core.ai.retry import RetryOrchestrator
from app.core.ai.router import ModelRouter
from app.core.ai.structured import PERSONA_PROFILE_SCHEMA, STORYBOARD_PLAN_SCHEMA
from app.services.generation.generation_service import GenerationService
from tests.utils.mock_utils import MockBuilder

REF_A = MediaInput(data=b"ref-a")
REF_B = MediaInput(data=b"ref-b")
REF_C = MediaInput(data=b"ref-c")


@pytest.fixture
def image_provider():
    return MockBuilder.create_mock_image_provider()


@pytest.fixture
def text_provider():
    return MockBuilder.create_mock_text_provider("Hello from Nova")


@pytest.fixture
def video_provider():
    return MockBuilder.create_mock_video_provider()


@pytest.fixture
def service(fast_retry, sleep_recorder, image_provider, text_provider, video_provider):
    """注入mock Provider的生成服务"""
    return GenerationService(
        client_factory=MockBuilder.create_mock_client_factory(),
        retry=fast_retry,
        router=ModelRouter(),
        composer=ConsistencyContextComposer(descriptor_min_length=5, video_max_reference_images=3),
        poller=AsyncOperationPoller(fast_retry, poll_interval=5.0, sleep=sleep_recorder),
        providers={
            ModelCapability.IMAGE_GEN: image_provider,
            ModelCapability.IMAGE_EDIT: image_provider,
            ModelCapability.VIDEO_GEN: video_provider,
            ModelCapability.CHAT: text_provider,
            ModelCapability.VISION: text_provider,
            ModelCapability.TEXT: text_provider,
        },
    )


@pytest.mark.unit
@pytest.mark.service
class TestImageGeneration:
    """图片生成测试"""

    @pytest.mark.asyncio
    async def test_generate_image_with_persona_descriptor(self, service, image_provider, make_persona):
        result = await service.generate_image(ImageGenerateRequest(
            prompt="drinking coffee", quality=ImageQuality.HIGH, persona=make_persona()
        ))

        selection, prompt = image_provider.generate_image.await_args.args
        assert selection.model == "gemini-3-pro-image-preview"
        assert selection.config == {"aspect_ratio": "1:1", "image_size": "2K"}
        assert prompt.startswith("Character Reference: short silver hair")
        assert "Scene/Action: drinking coffee" in prompt
        assert result.image_url.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_generate_image_retries_rate_limits(self, service, image_provider, sleep_recorder):
        calls = []
        original = image_provider.generate_image.side_effect

        async def flaky(selection, prompt, images=()):
            calls.append(prompt)
            if len(calls) < 3:
                raise MockBuilder.create_api_error(429, "quota exceeded", "RESOURCE_EXHAUSTED")
            return await original(selection, prompt, images)

        image_provider.generate_image.side_effect = flaky

        result = await service.generate_image(ImageGenerateRequest(prompt="a fox"))

        assert result.prompt == "a fox"
        assert len(calls) == 3
        assert sleep_recorder.delays == [1.0, 1.5]

    @pytest.mark.asyncio
    async def test_generate_image_empty_prompt(self, service, image_provider):
        with pytest.raises(ValueError):
            await service.generate_image(ImageGenerateRequest(prompt="   "))

        image_provider.generate_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_image_is_not_retried(self, service, image_provider, sleep_recorder):
        image_provider.generate_image.side_effect = MissingArtifactError("no image")

        with pytest.raises(MissingArtifactError):
            await service.generate_image(ImageGenerateRequest(prompt="a fox"))

        assert image_provider.generate_image.await_count == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_edit_image_passes_input_image(self, service, image_provider, sample_image):
        await service.edit_image(ImageEditRequest(
            image=sample_image, prompt="remove background", aspect_ratio=ImageAspectRatio.TALL
        ))

        call = image_provider.generate_image.await_args
        assert call.args[0].capability == ModelCapability.IMAGE_EDIT
        assert call.args[0].config == {"aspect_ratio": "9:16"}
        assert call.args[1] == "remove background"
        assert call.kwargs["images"] == (sample_image,)

    @pytest.mark.asyncio
    async def test_storyboard_panel_is_wide(self, service, image_provider):
        await service.render_storyboard_panel(StoryboardPanelRequest(panel="hero enters", story="space heist"))

        selection, prompt = image_provider.generate_image.await_args.args
        assert selection.config == {"aspect_ratio": "16:9"}
        assert prompt == "Storyboard panel, cinematic sketch style: hero enters. Context: space heist"

    @pytest.mark.asyncio
    async def test_persona_avatar(self, service, image_provider, make_persona):
        await service.generate_persona_avatar(make_persona())

        selection, prompt = image_provider.generate_image.await_args.args
        assert selection.config == {"aspect_ratio": "1:1"}
        assert prompt.startswith("Icon for character Nova. short silver hair")


@pytest.mark.unit
@pytest.mark.service
class TestVideoGeneration:
    """视频生成测试"""

    @pytest.mark.asyncio
    async def test_persona_references_force_consistency_model(self, service, video_provider, make_persona):
        persona = make_persona(reference_images=(REF_A, REF_B, REF_C))

        result = await service.generate_video(VideoGenerateRequest(
            prompt="walks through rain",
            resolution=VideoResolution.FHD,
            aspect_ratio=VideoAspectRatio.PORTRAIT,
            persona=persona,
        ))

        call = video_provider.submit.await_args
        selection = call.args[0]
        assert selection.model == "veo-3.1-generate-preview"
        assert selection.config["aspect_ratio"] == "16:9"
        assert selection.config["resolution"] == "720p"
        assert call.args[1] == "walks through rain"
        assert call.kwargs["reference_images"] == (REF_A, REF_B, REF_C)
        assert result.metadata["aspect_ratio"] == "16:9"
        assert result.metadata["video_mode"] == "reference"

    @pytest.mark.asyncio
    async def test_start_frame_with_default_prompt(self, service, video_provider, make_persona, sample_image):
        result = await service.generate_video(VideoGenerateRequest(
            start_image=sample_image, persona=make_persona(reference_images=(REF_A,))
        ))

        call = video_provider.submit.await_args
        assert call.args[0].model == "veo-3.1-fast-generate-preview"
        assert call.args[1] == "Animate this image"
        assert call.kwargs["start_image"] is sample_image
        assert call.kwargs["reference_images"] == ()
        assert result.prompt == "Animate this image"

    @pytest.mark.asyncio
    async def test_polls_and_downloads(self, service, video_provider, sleep_recorder):
        video_provider.refresh.side_effect = [
            OperationHandle(name="operations/video-1"),
            OperationHandle(name="operations/video-1", done=True, artifact_uri="https://files/video-1"),
        ]

        result = await service.generate_video(VideoGenerateRequest(prompt="ocean waves"))

        assert video_provider.refresh.await_count == 2
        video_provider.download.assert_awaited_once_with("https://files/video-1")
        assert result.video_bytes == b"video-bytes"
        assert result.source_uri == "https://files/video-1"
        assert result.data_uri.startswith("data:video/mp4;base64,")
        assert sleep_recorder.delays == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_missing_video_uri(self, service, video_provider):
        video_provider.refresh.side_effect = [OperationHandle(name="operations/video-1", done=True)]

        with pytest.raises(MissingArtifactError):
            await service.generate_video(VideoGenerateRequest(prompt="ocean waves"))

        video_provider.download.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.service
class TestTextGeneration:
    """文本生成测试"""

    @pytest.mark.asyncio
    async def test_analyze_uses_default_prompt(self, service, text_provider, sample_image):
        text = await service.analyze_media(AnalyzeRequest(media=sample_image))

        call = text_provider.generate_text.await_args
        assert text == "Hello from Nova"
        assert call.args[0].capability == ModelCapability.VISION
        assert call.args[1] == "Describe this media in detail."
        assert call.kwargs["media"] == (sample_image,)

    @pytest.mark.asyncio
    async def test_analyze_empty_result(self, service, text_provider, sample_image):
        text_provider.generate_text.return_value = ""

        assert await service.analyze_media(AnalyzeRequest(media=sample_image)) == "No analysis available."

    @pytest.mark.asyncio
    async def test_chat_prepends_persona_examples(self, service, text_provider, make_persona):
        await service.chat(ChatRequest(
            message="Ready?",
            persona=make_persona(),
            history=(ChatTurn(role="user", text="Status?"), ChatTurn(role="model", text="All green.")),
        ))

        call = text_provider.generate_text.await_args
        assert call.args[1] == "Ready?"
        assert call.kwargs["system_instruction"] == "You are Nova, a cheerful space pilot."
        assert [t.text for t in call.kwargs["history"]] == [
            "Hi!", "Hey there, cadet!", "Where to?", "To the stars!", "Status?", "All green."
        ]

    @pytest.mark.asyncio
    async def test_chat_without_persona(self, service, text_provider):
        await service.chat(ChatRequest(message="hello"))

        call = text_provider.generate_text.await_args
        assert call.kwargs["system_instruction"] is None
        assert call.kwargs["history"] == []

    @pytest.mark.asyncio
    async def test_chat_empty_message(self, service):
        with pytest.raises(ValueError):
            await service.chat(ChatRequest(message=""))

    @pytest.mark.asyncio
    async def test_optimize_instruction(self, service, text_provider):
        text_provider.generate_text.return_value = "  You are Nova, a bold and witty pilot.  "

        text = await service.optimize_instruction(OptimizeInstructionRequest(instruction="You are Nova."))

        call = text_provider.generate_text.await_args
        assert text == "You are Nova, a bold and witty pilot."
        assert 'Original: "You are Nova."' in call.args[1]
        assert call.kwargs["temperature"] == 0.7
        assert call.kwargs["max_output_tokens"] == 1024

    @pytest.mark.asyncio
    async def test_optimize_instruction_keeps_original_on_empty_result(self, service, text_provider):
        text_provider.generate_text.return_value = ""

        text = await service.optimize_instruction(OptimizeInstructionRequest(instruction="You are Nova."))

        assert text == "You are Nova."

    @pytest.mark.asyncio
    async def test_derive_persona_caps_images(self, service, text_provider):
        images = tuple(MediaInput(data=bytes([i])) for i in range(6))

        text = await service.derive_persona_from_references(DerivePersonaRequest(images=images))

        call = text_provider.generate_text.await_args
        assert text == "Hello from Nova"
        assert call.kwargs["media"] == images[:4]
        assert "Visual Consistency Prompt" in call.args[1]

    @pytest.mark.asyncio
    async def test_derive_persona_default_descriptor(self, service, text_provider):
        text_provider.generate_text.return_value = "   "

        text = await service.derive_persona_from_references(DerivePersonaRequest(images=(REF_A,)))

        assert text == "A character with consistent features."

    @pytest.mark.asyncio
    async def test_derive_persona_requires_images(self, service):
        with pytest.raises(ValueError):
            await service.derive_persona_from_references(DerivePersonaRequest(images=()))


@pytest.mark.unit
@pytest.mark.service
class TestStructuredGeneration:
    """结构化生成测试"""

    @pytest.mark.asyncio
    async def test_plan_storyboard(self, service, text_provider):
        text_provider.generate_text.return_value = '["Launch", "Dogfight", "Escape", "Landing"]'

        result = await service.plan_storyboard(StoryboardPlanRequest(story="a space dogfight"))

        call = text_provider.generate_text.await_args
        assert result.value == ["Launch", "Dogfight", "Escape", "Landing"]
        assert not result.is_fallback
        assert call.kwargs["response_schema"] is STORYBOARD_PLAN_SCHEMA
        assert '"a space dogfight"' in call.args[1]

    @pytest.mark.asyncio
    async def test_plan_storyboard_fallback(self, service, text_provider):
        text_provider.generate_text.return_value = "Panel one: launch. Panel two: chase."

        result = await service.plan_storyboard(StoryboardPlanRequest(story="a space dogfight"))

        assert result.value == ["Scene 1", "Scene 2", "Scene 3", "Scene 4"]
        assert result.is_fallback

    @pytest.mark.asyncio
    async def test_plan_storyboard_provider_error_propagates(self, service, text_provider, sleep_recorder):
        error = MockBuilder.create_api_error(500, "internal")
        text_provider.generate_text.side_effect = error

        with pytest.raises(type(error)):
            await service.plan_storyboard(StoryboardPlanRequest(story="a heist"))

        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_auto_author_persona(self, service, text_provider):
        text_provider.generate_text.return_value = json.dumps({
            "systemInstruction": "You are Nova.",
            "consistencyContext": "silver hair, green jacket",
            "examples": [{"input": "Hi", "output": "Hey"}],
        })

        result = await service.auto_author_persona(AutoAuthorPersonaRequest(
            name="Nova", description="a space pilot", visual_seed="silver hair"
        ))

        call = text_provider.generate_text.await_args
        assert call.kwargs["response_schema"] is PERSONA_PROFILE_SCHEMA
        assert 'persona for "Nova": a space pilot.' in call.args[1]
        assert "Visuals: silver hair" in call.args[1]
        assert result.value.consistency_context == "silver hair, green jacket"
        assert len(result.value.examples) == 1

    @pytest.mark.asyncio
    async def test_auto_author_persona_fallback(self, service, text_provider):
        text_provider.generate_text.return_value = "not json"

        result = await service.auto_author_persona(AutoAuthorPersonaRequest(name="Nova", description="a pilot"))

        assert result.is_fallback
        assert result.value.instruction == "You are Nova. a pilot"

    @pytest.mark.asyncio
    async def test_auto_author_requires_name(self, service):
        with pytest.raises(ValueError):
            await service.auto_author_persona(AutoAuthorPersonaRequest(name=" ", description="x"))


@pytest.mark.unit
@pytest.mark.service
class TestProviderResolution:
    """Provider解析测试"""

    def test_providers_come_from_factory_when_not_injected(self):
        service = GenerationService(client_factory=MockBuilder.create_mock_client_factory())

        provider = service._provider(ModelCapability.VIDEO_GEN)

        assert provider.get_provider_name() == "genai"
        assert service._provider(ModelCapability.VIDEO_GEN) is provider

    @pytest.mark.asyncio
    async def test_text_provider_uses_client_factory(self):
        client_factory = MockBuilder.create_mock_client_factory()
        client_factory.create.return_value.models.generate_content.return_value = (
            MockBuilder.create_content_response(text="pong")
        )
        service = GenerationService(client_factory=client_factory, retry=RetryOrchestrator())

        assert await service.chat(ChatRequest(message="ping")) == "pong"
        client_factory.create.assert_called_once()


@pytest.mark.unit
@pytest.mark.service
class TestEndToEndScenarios:
    """真实Provider + mock SDK客户端的端到端场景"""

    @pytest.mark.asyncio
    async def test_square_normal_image_yields_png_data_uri(self, fast_retry, png_bytes):
        client_factory = MockBuilder.create_mock_client_factory()
        generate_content = client_factory.create.return_value.models.generate_content
        generate_content.return_value = MockBuilder.create_content_response(
            [MockBuilder.create_image_part(png_bytes)]
        )
        service = GenerationService(client_factory=client_factory, retry=fast_retry)

        result = await service.generate_image(ImageGenerateRequest(
            prompt="a red balloon over Paris",
            quality=ImageQuality.NORMAL,
            aspect_ratio=ImageAspectRatio.SQUARE,
        ))

        call = generate_content.call_args.kwargs
        assert call["model"] == "gemini-2.5-flash-image"
        assert call["config"].image_config.aspect_ratio == "1:1"
        assert call["config"].image_config.image_size is None
        assert result.image_url.startswith("data:image/png;base64,")
        assert result.prompt == "a red balloon over Paris"
