"""
v1路由聚合
端点文件内部只声明相对路径，前缀和标签在这里统一挂载
"""

from fastapi import APIRouter

from app.api.v1.endpoints import credentials, generation, personas

api_router = APIRouter()

api_router.include_router(generation.router, prefix="/generate", tags=["AI生成"])
api_router.include_router(personas.router, prefix="/personas", tags=["角色库"])
api_router.include_router(credentials.router, prefix="/credentials", tags=["凭证"])
