"""
AI生成API端点
负责图片、视频、媒体分析、角色对话与角色创作等生成功能
"""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_generation_handler
from app.schemas.common import StandardResponse
from app.schemas.generation import (
    AnalyzeBody,
    AutoAuthorPersonaBody,
    ChatBody,
    DerivePersonaBody,
    ImageEditBody,
    ImageGenerateBody,
    OptimizeInstructionBody,
    PersonaAvatarBody,
    StoryboardPanelBody,
    StoryboardPlanBody,
    VideoGenerateBody,
)
from app.services.generation.generation_handler import GenerationHandler
from app.core.log_utils import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["AI生成"])


@router.post(
    "/image",
    response_model=StandardResponse,
    summary="生成图片",
    description="根据文本描述生成图片，可选角色保持外观一致"
)
async def generate_image(
    body: ImageGenerateBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """
    生成图片接口

    Args:
        body: 包含prompt、aspect_ratio、quality及可选角色的请求
        handler: 生成处理器

    Returns:
        StandardResponse: data为图片结果
    """
    data = await handler.handle_generate_image(body)
    return StandardResponse(status="success", message="图片生成成功", data=data)


@router.post(
    "/image/edit",
    response_model=StandardResponse,
    summary="编辑图片",
    description="根据编辑指令修改输入图片"
)
async def edit_image(
    body: ImageEditBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """编辑图片接口"""
    data = await handler.handle_edit_image(body)
    return StandardResponse(status="success", message="图片编辑成功", data=data)


@router.post(
    "/video",
    response_model=StandardResponse,
    summary="生成视频",
    description="根据文本、首帧图片或角色参考图生成视频，完成后返回视频内容"
)
async def generate_video(
    body: VideoGenerateBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """
    生成视频接口

    请求会一直等待到视频生成完成，耗时通常在数十秒到数分钟。

    Args:
        body: 视频生成请求
        handler: 生成处理器

    Returns:
        StandardResponse: data为视频结果
    """
    data = await handler.handle_generate_video(body)
    return StandardResponse(status="success", message="视频生成成功", data=data)


@router.post(
    "/analyze",
    response_model=StandardResponse,
    summary="分析媒体",
    description="描述或分析图片/视频内容"
)
async def analyze_media(
    body: AnalyzeBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """分析媒体接口"""
    data = await handler.handle_analyze(body)
    return StandardResponse(status="success", message="分析完成", data=data)


@router.post(
    "/chat",
    response_model=StandardResponse,
    summary="角色对话",
    description="以角色身份回复，角色示例对话作为少样本历史"
)
async def chat(
    body: ChatBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """角色对话接口"""
    data = await handler.handle_chat(body)
    return StandardResponse(status="success", message="回复成功", data=data)


@router.post(
    "/persona/optimize-instruction",
    response_model=StandardResponse,
    summary="优化角色指令"
)
async def optimize_instruction(
    body: OptimizeInstructionBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """优化角色指令接口"""
    data = await handler.handle_optimize_instruction(body)
    return StandardResponse(status="success", message="指令优化完成", data=data)


@router.post(
    "/persona/derive",
    response_model=StandardResponse,
    summary="从参考图提取角色外观",
    description="分析参考图中的不变特征，输出视觉一致性描述"
)
async def derive_persona(
    body: DerivePersonaBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """提取角色外观接口"""
    data = await handler.handle_derive_persona(body)
    return StandardResponse(status="success", message="角色外观提取完成", data=data)


@router.post(
    "/persona/auto-author",
    response_model=StandardResponse,
    summary="自动生成角色档案",
    description="根据名称与描述生成角色指令、视觉描述与示例对话"
)
async def auto_author_persona(
    body: AutoAuthorPersonaBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """自动生成角色档案接口"""
    data = await handler.handle_auto_author_persona(body)
    return StandardResponse(status="success", message="角色档案生成完成", data=data)


@router.post(
    "/persona/avatar",
    response_model=StandardResponse,
    summary="生成角色头像"
)
async def generate_persona_avatar(
    body: PersonaAvatarBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """生成角色头像接口"""
    data = await handler.handle_generate_avatar(body)
    return StandardResponse(status="success", message="头像生成成功", data=data)


@router.post(
    "/storyboard/plan",
    response_model=StandardResponse,
    summary="分镜规划",
    description="将故事拆分为4个分镜画面描述，解析失败时返回默认分镜"
)
async def plan_storyboard(
    body: StoryboardPlanBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """分镜规划接口"""
    data = await handler.handle_plan_storyboard(body)
    return StandardResponse(status="success", message="分镜规划完成", data=data)


@router.post(
    "/storyboard/panel",
    response_model=StandardResponse,
    summary="渲染分镜画面"
)
async def render_storyboard_panel(
    body: StoryboardPanelBody,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """渲染分镜画面接口"""
    data = await handler.handle_render_storyboard_panel(body)
    return StandardResponse(status="success", message="分镜画面生成成功", data=data)
