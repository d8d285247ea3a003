"""
角色库API端点
提供角色的保存、列出与删除，供生成接口按persona_id引用
"""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_generation_handler
from app.schemas.common import StandardResponse
from app.schemas.persona import PersonaSchema
from app.services.generation.generation_handler import GenerationHandler

router = APIRouter(tags=["角色库"])


@router.get("", response_model=StandardResponse, summary="列出角色")
async def list_personas(
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """列出角色摘要，按最近修改时间倒序"""
    data = await handler.handle_list_personas()
    return StandardResponse(status="success", message="获取角色列表成功", data=data)


@router.post("", response_model=StandardResponse, summary="保存角色")
async def save_persona(
    body: PersonaSchema,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """新增或覆盖角色"""
    data = await handler.handle_save_persona(body)
    return StandardResponse(status="success", message="角色保存成功", data=data)


@router.delete("/{persona_id}", response_model=StandardResponse, summary="删除角色")
async def delete_persona(
    persona_id: str,
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """删除角色，不存在时同样返回成功"""
    await handler.handle_delete_persona(persona_id)
    return StandardResponse(status="success", message="角色删除成功")
