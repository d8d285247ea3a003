"""
生成处理器
处理网络请求、日志记录和异常处理
"""

from typing import Any, Dict, List, NoReturn, Optional

from fastapi import HTTPException, status
from google.genai import errors as genai_errors

from app.core.ai.exceptions import (
    CredentialNotSelectedError,
    GenerationError,
    OperationTimeoutError,
)
from app.core.ai.models import ChatTurn, MediaInput, Persona
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
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.schemas.generation import (
    AnalyzeBody,
    AutoAuthorPersonaBody,
    ChatBody,
    DerivePersonaBody,
    ImageEditBody,
    ImageGenerateBody,
    ImageResultData,
    OptimizeInstructionBody,
    PersonaAvatarBody,
    PersonaReference,
    StoryboardPanelBody,
    StoryboardPlanBody,
    StoryboardPlanData,
    TextResultData,
    VideoGenerateBody,
    VideoResultData,
)
from app.schemas.persona import PersonaProfileData, PersonaSchema
from app.services.generation.generation_service import GenerationService
from app.services.persona.store import PersonaStore

logger = get_logger(__name__)


def to_http_exception(error: Exception) -> HTTPException:
    """将生成过程中的异常转换为HTTP异常"""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, CredentialNotSelectedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error.message)
    if isinstance(error, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, genai_errors.APIError):
        code = error.code if isinstance(error.code, int) and 400 <= error.code < 600 else status.HTTP_502_BAD_GATEWAY
        return HTTPException(status_code=code, detail=f"Provider调用失败: {error.message or str(error)}")
    if isinstance(error, OperationTimeoutError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=error.message)
    if isinstance(error, GenerationError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"生成失败: {str(error)}"
    )


class GenerationHandler:
    """生成处理器 - 处理网络请求、日志记录和异常处理"""

    def __init__(self, service: GenerationService, persona_store: PersonaStore):
        self.service = service
        self.persona_store = persona_store

    def _fail(self, capability: str, error: Exception) -> NoReturn:
        http_error = to_http_exception(error)
        if http_error.status_code >= 500:
            logger.error(
                log_messages.GENERATION_FAILED,
                exception=error,
                operation="generation_failed",
                capability=capability
            )
        else:
            logger.warning(
                log_messages.GENERATION_FAILED,
                operation="generation_failed",
                capability=capability,
                status_code=http_error.status_code,
                error=str(error)
            )
        raise http_error from error

    async def _resolve_persona(self, reference: PersonaReference) -> Optional[Persona]:
        if reference.persona is not None:
            return reference.persona.to_persona()
        if not reference.persona_id:
            return None

        persona = await self.persona_store.get_by_id(reference.persona_id)
        if persona is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"角色不存在: {reference.persona_id}"
            )
        return persona

    async def handle_generate_image(self, body: ImageGenerateBody) -> ImageResultData:
        """处理文生图请求"""
        try:
            result = await self.service.generate_image(ImageGenerateRequest(
                prompt=body.prompt,
                aspect_ratio=body.aspect_ratio,
                quality=body.quality,
                persona=await self._resolve_persona(body),
            ))
            return ImageResultData.from_result(result)
        except Exception as e:
            self._fail("image_generate", e)

    async def handle_edit_image(self, body: ImageEditBody) -> ImageResultData:
        """处理图片编辑请求"""
        try:
            result = await self.service.edit_image(ImageEditRequest(
                image=MediaInput.from_base64(body.image, body.mime_type),
                prompt=body.prompt,
                aspect_ratio=body.aspect_ratio,
                quality=body.quality,
            ))
            return ImageResultData.from_result(result)
        except Exception as e:
            self._fail("image_edit", e)

    async def handle_generate_video(self, body: VideoGenerateBody) -> VideoResultData:
        """处理视频生成请求"""
        try:
            start_image = None
            if body.start_image:
                start_image = MediaInput.from_base64(body.start_image, body.start_image_mime_type)

            result = await self.service.generate_video(VideoGenerateRequest(
                prompt=body.prompt,
                resolution=body.resolution,
                aspect_ratio=body.aspect_ratio,
                persona=await self._resolve_persona(body),
                start_image=start_image,
                reference_images=tuple(MediaInput.from_base64(image) for image in body.reference_images),
            ))
            return VideoResultData.from_result(result)
        except Exception as e:
            self._fail("video_generate", e)

    async def handle_analyze(self, body: AnalyzeBody) -> TextResultData:
        """处理媒体分析请求"""
        try:
            text = await self.service.analyze_media(AnalyzeRequest(
                media=MediaInput.from_base64(body.media, body.mime_type),
                prompt=body.prompt,
            ))
            return TextResultData(text=text)
        except Exception as e:
            self._fail("analyze", e)

    async def handle_chat(self, body: ChatBody) -> TextResultData:
        """处理角色对话请求"""
        try:
            text = await self.service.chat(ChatRequest(
                message=body.message,
                persona=await self._resolve_persona(body),
                history=tuple(ChatTurn(role=turn.role, text=turn.text) for turn in body.history),
            ))
            return TextResultData(text=text)
        except Exception as e:
            self._fail("chat", e)

    async def handle_optimize_instruction(self, body: OptimizeInstructionBody) -> TextResultData:
        """处理指令优化请求"""
        try:
            text = await self.service.optimize_instruction(
                OptimizeInstructionRequest(instruction=body.instruction)
            )
            return TextResultData(text=text)
        except Exception as e:
            self._fail("optimize_instruction", e)

    async def handle_derive_persona(self, body: DerivePersonaBody) -> TextResultData:
        """处理参考图视觉描述提取请求"""
        try:
            text = await self.service.derive_persona_from_references(DerivePersonaRequest(
                images=tuple(MediaInput.from_base64(image) for image in body.images),
            ))
            return TextResultData(text=text)
        except Exception as e:
            self._fail("derive_persona", e)

    async def handle_auto_author_persona(self, body: AutoAuthorPersonaBody) -> PersonaProfileData:
        """处理角色档案自动生成请求"""
        try:
            result = await self.service.auto_author_persona(AutoAuthorPersonaRequest(
                name=body.name,
                description=body.description,
                visual_seed=body.visual_seed,
            ))
            return PersonaProfileData.from_profile(result.value, is_fallback=result.is_fallback)
        except Exception as e:
            self._fail("auto_author_persona", e)

    async def handle_plan_storyboard(self, body: StoryboardPlanBody) -> StoryboardPlanData:
        """处理分镜规划请求"""
        try:
            result = await self.service.plan_storyboard(StoryboardPlanRequest(story=body.story))
            return StoryboardPlanData(scenes=result.value, is_fallback=result.is_fallback)
        except Exception as e:
            self._fail("storyboard_plan", e)

    async def handle_render_storyboard_panel(self, body: StoryboardPanelBody) -> ImageResultData:
        """处理分镜画面渲染请求"""
        try:
            result = await self.service.render_storyboard_panel(StoryboardPanelRequest(
                panel=body.panel,
                story=body.story,
                persona=await self._resolve_persona(body),
            ))
            return ImageResultData.from_result(result)
        except Exception as e:
            self._fail("storyboard_panel", e)

    async def handle_generate_avatar(self, body: PersonaAvatarBody) -> ImageResultData:
        """处理角色头像生成请求"""
        try:
            persona = await self._resolve_persona(body)
            if persona is None:
                if not body.name:
                    raise ValueError("需要提供角色或角色名称")
                persona = Persona(id="", name=body.name, consistency_context=body.consistency_context)

            result = await self.service.generate_persona_avatar(persona)
            return ImageResultData.from_result(result)
        except Exception as e:
            self._fail("persona_avatar", e)

    def handle_credential_status(self) -> Dict[str, Any]:
        """查询凭证状态"""
        return {"has_credential": self.service.client_factory.credentials.has_selected_credential()}

    async def handle_list_personas(self) -> List[Dict[str, Any]]:
        """列出角色库中的角色摘要"""
        return [
            {
                "id": persona.id,
                "name": persona.name,
                "has_consistency_context": bool(persona.consistency_context),
                "reference_image_count": len(persona.reference_images),
                "example_count": len(persona.examples),
                "last_modified": persona.last_modified,
            }
            for persona in await self.persona_store.list_all()
        ]

    async def handle_save_persona(self, body: PersonaSchema) -> Dict[str, Any]:
        """保存角色到角色库"""
        try:
            persona = body.to_persona()
        except ValueError as e:
            self._fail("persona_save", e)
        await self.persona_store.save(persona)
        return {"id": persona.id}

    async def handle_delete_persona(self, persona_id: str) -> None:
        """从角色库删除角色"""
        await self.persona_store.delete_by_id(persona_id)
