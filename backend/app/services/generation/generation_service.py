"""
生成服务（Facade层）
按能力组合模型路由、角色上下文组装、重试、长任务轮询与结构化输出，对外提供统一的接口
"""

from typing import Dict, List, Optional

from app.core.ai.composer import ConsistencyContextComposer
from app.core.ai.base import BaseAIProvider
from app.core.ai.factory import AIProviderFactory
from app.core.ai.models import (
    ImageGenerationResult,
    ModelCapability,
    ModelSelection,
    Persona,
    PersonaProfile,
    StructuredResult,
    VideoGenerationResult,
)
from app.core.ai.poller import AsyncOperationPoller
from app.core.ai.providers.genai.client import GenAIClientFactory
from app.core.ai.registry import DEFAULT_PROVIDER, register_all_providers
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
from app.core.ai.structured import StructuredOutputCoordinator
from app.core.config import settings
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.prompts import PromptHelper, get_prompt_manager

logger = get_logger(__name__)

DEFAULT_ANALYZE_PROMPT = "Describe this media in detail."
EMPTY_ANALYSIS_TEXT = "No analysis available."
DEFAULT_DERIVED_DESCRIPTOR = "A character with consistent features."


class GenerationService:
    """生成服务（门面模式）"""

    def __init__(
        self,
        client_factory: Optional[GenAIClientFactory] = None,
        retry: Optional[RetryOrchestrator] = None,
        router: Optional[ModelRouter] = None,
        composer: Optional[ConsistencyContextComposer] = None,
        poller: Optional[AsyncOperationPoller] = None,
        structured: Optional[StructuredOutputCoordinator] = None,
        prompt_helper: Optional[PromptHelper] = None,
        providers: Optional[Dict[ModelCapability, BaseAIProvider]] = None,
        provider_name: str = DEFAULT_PROVIDER,
    ):
        """
        初始化服务

        Args:
            client_factory: SDK客户端工厂，每次调用创建新客户端
            retry: 重试编排器
            router: 模型路由器
            composer: 角色上下文组装器
            poller: 长任务轮询器，默认复用 retry
            structured: 结构化输出协调器
            prompt_helper: 提示词模板工具
            providers: 按能力指定的Provider实例，未指定的能力由工厂创建
            provider_name: 工厂中注册的Provider名称
        """
        self.client_factory = client_factory or GenAIClientFactory()
        self.retry = retry or RetryOrchestrator()
        self.router = router or ModelRouter()
        self.composer = composer or ConsistencyContextComposer()
        self.poller = poller or AsyncOperationPoller(self.retry)
        self.structured = structured or StructuredOutputCoordinator()
        self.prompt_helper = prompt_helper or PromptHelper(get_prompt_manager())
        self.provider_name = provider_name
        self._providers = dict(providers or {})

    def _provider(self, capability: ModelCapability):
        """获取能力对应的Provider"""
        if capability in self._providers:
            return self._providers[capability]

        if not AIProviderFactory.is_registered(capability, self.provider_name):
            register_all_providers()
        provider = AIProviderFactory.create(capability, self.provider_name, self.client_factory)
        self._providers[capability] = provider
        return provider

    def _log_start(self, selection: ModelSelection) -> None:
        logger.info(
            log_messages.GENERATION_START,
            operation="generation",
            capability=selection.capability.value,
            model=selection.model
        )

    def _log_success(self, selection: ModelSelection) -> None:
        logger.info(
            log_messages.GENERATION_SUCCESS,
            operation="generation",
            capability=selection.capability.value,
            model=selection.model
        )

    async def _render_image(self, request: ImageGenerateRequest) -> ImageGenerationResult:
        shaped = self.composer.compose_image(request)
        selection = self.router.route(shaped)
        provider = self._provider(selection.capability)

        self._log_start(selection)
        result = await self.retry.with_retry(
            lambda: provider.generate_image(selection, shaped.prompt)
        )
        self._log_success(selection)
        return result

    async def _generate_text(self, request, prompt: str, **kwargs) -> str:
        selection = self.router.route(request)
        provider = self._provider(selection.capability)

        self._log_start(selection)
        text = await self.retry.with_retry(
            lambda: provider.generate_text(selection, prompt, **kwargs)
        )
        self._log_success(selection)
        return text or ""

    # ==================== 图片 ====================

    async def generate_image(self, request: ImageGenerateRequest) -> ImageGenerationResult:
        """
        文生图

        Args:
            request: 文生图请求，可带角色

        Returns:
            ImageGenerationResult: data:image/png;base64 形式的图片
        """
        if not request.prompt or not request.prompt.strip():
            raise ValueError("提示词不能为空")
        return await self._render_image(request)

    async def edit_image(self, request: ImageEditRequest) -> ImageGenerationResult:
        """
        基于输入图片编辑

        Args:
            request: 图片编辑请求

        Returns:
            ImageGenerationResult: 编辑后的图片
        """
        if not request.prompt or not request.prompt.strip():
            raise ValueError("编辑指令不能为空")

        selection = self.router.route(request)
        provider = self._provider(selection.capability)

        self._log_start(selection)
        result = await self.retry.with_retry(
            lambda: provider.generate_image(selection, request.prompt, images=(request.image,))
        )
        self._log_success(selection)
        return result

    async def render_storyboard_panel(self, request: StoryboardPanelRequest) -> ImageGenerationResult:
        """渲染单个分镜画面（16:9草图风格）"""
        if not request.panel or not request.panel.strip():
            raise ValueError("分镜描述不能为空")
        return await self._render_image(self.composer.compose_storyboard_panel(request))

    async def generate_persona_avatar(self, persona: Persona) -> ImageGenerationResult:
        """根据角色名称与视觉描述生成头像"""
        return await self._render_image(
            self.composer.compose_avatar(persona.name, persona.consistency_context)
        )

    # ==================== 视频 ====================

    async def generate_video(self, request: VideoGenerateRequest) -> VideoGenerationResult:
        """
        生成视频

        提交任务后轮询至完成，再使用同一凭证下载视频内容。

        Args:
            request: 视频生成请求

        Returns:
            VideoGenerationResult: 视频字节及来源URI
        """
        shaped = self.composer.compose_video(request)
        selection = self.router.route(shaped)
        provider = self._provider(selection.capability)

        self._log_start(selection)
        uri, data = await self.poller.run(
            submit=lambda: provider.submit(
                selection,
                selection.prompt,
                start_image=shaped.start_image,
                reference_images=shaped.reference_images,
            ),
            refresh=provider.refresh,
            download=provider.download,
        )
        self._log_success(selection)

        return VideoGenerationResult(
            video_bytes=data,
            model=selection.model,
            prompt=selection.prompt,
            source_uri=uri,
            metadata={"video_mode": selection.video_mode.value, **selection.config},
        )

    # ==================== 文本 ====================

    async def analyze_media(self, request: AnalyzeRequest) -> str:
        """分析图片或视频内容"""
        text = await self._generate_text(
            request,
            request.prompt or DEFAULT_ANALYZE_PROMPT,
            media=(request.media,),
        )
        return text or EMPTY_ANALYSIS_TEXT

    async def chat(self, request: ChatRequest) -> str:
        """
        与角色对话

        角色的示例对话按顺序作为历史放在调用方历史之前，角色指令作为系统指令。
        """
        if not request.message or not request.message.strip():
            raise ValueError("消息不能为空")

        persona = request.persona
        return await self._generate_text(
            request,
            request.message,
            system_instruction=persona.instruction if persona and persona.instruction else None,
            history=self.composer.compose_chat_history(persona, request.history),
        )

    async def optimize_instruction(self, request: OptimizeInstructionRequest) -> str:
        """优化角色系统指令，模型无返回时保留原指令"""
        if not request.instruction or not request.instruction.strip():
            raise ValueError("指令不能为空")

        prepared = self.prompt_helper.prepare_prompts(
            "persona", "optimize_instruction", {"instruction": request.instruction}
        )
        text = await self._generate_text(
            request,
            prepared.user_prompt,
            system_instruction=prepared.system_prompt,
            temperature=prepared.temperature,
            max_output_tokens=prepared.max_tokens,
        )
        return text.strip() or request.instruction

    async def derive_persona_from_references(self, request: DerivePersonaRequest) -> str:
        """从参考图中提取角色的视觉描述"""
        if not request.images:
            raise ValueError("至少需要一张参考图")

        prepared = self.prompt_helper.prepare_prompts("persona", "derive_from_references")
        text = await self._generate_text(
            request,
            prepared.user_prompt,
            media=tuple(request.images[:settings.persona_max_reference_images]),
            system_instruction=prepared.system_prompt,
            temperature=prepared.temperature,
            max_output_tokens=prepared.max_tokens,
        )
        return text.strip() or DEFAULT_DERIVED_DESCRIPTOR

    # ==================== 结构化输出 ====================

    async def auto_author_persona(self, request: AutoAuthorPersonaRequest) -> StructuredResult[PersonaProfile]:
        """根据名称和描述自动生成角色档案"""
        if not request.name or not request.name.strip():
            raise ValueError("角色名称不能为空")

        prepared = self.prompt_helper.prepare_prompts(
            "persona",
            "auto_author",
            {
                "name": request.name,
                "description": request.description,
                "visual_seed": request.visual_seed,
            },
        )
        return await self.structured.author_persona(
            lambda schema: self._generate_text(
                request,
                prepared.user_prompt,
                system_instruction=prepared.system_prompt,
                response_schema=schema,
                temperature=prepared.temperature,
                max_output_tokens=prepared.max_tokens,
            ),
            request.name,
            request.description,
            request.visual_seed,
        )

    async def plan_storyboard(self, request: StoryboardPlanRequest) -> StructuredResult[List[str]]:
        """把故事拆分为分镜画面描述"""
        if not request.story or not request.story.strip():
            raise ValueError("故事描述不能为空")

        prepared = self.prompt_helper.prepare_prompts(
            "storyboard", "plan", {"story": request.story}
        )
        return await self.structured.plan_storyboard(
            lambda schema: self._generate_text(
                request,
                prepared.user_prompt,
                system_instruction=prepared.system_prompt,
                response_schema=schema,
                temperature=prepared.temperature,
                max_output_tokens=prepared.max_tokens,
            )
        )
