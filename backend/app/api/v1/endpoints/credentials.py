"""
凭证状态API端点
"""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_generation_handler
from app.schemas.common import StandardResponse
from app.schemas.generation import CredentialStatusData
from app.services.generation.generation_handler import GenerationHandler

router = APIRouter(tags=["凭证"])


@router.get("/status", response_model=StandardResponse, summary="查询凭证状态")
def credential_status(
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """返回是否已配置Gemini API密钥，不返回密钥本身"""
    data = CredentialStatusData(**handler.handle_credential_status())
    return StandardResponse(status="success", message="获取凭证状态成功", data=data)
