"""
API依赖注入
生成服务与角色库在进程内共享，测试中可通过 dependency_overrides 替换
"""

from functools import lru_cache

from fastapi import Depends

from app.services.generation.generation_handler import GenerationHandler
from app.services.generation.generation_service import GenerationService
from app.services.persona.store import InMemoryPersonaStore, PersonaStore


@lru_cache()
def get_generation_service() -> GenerationService:
    """获取生成服务实例"""
    return GenerationService()


@lru_cache()
def get_persona_store() -> PersonaStore:
    """获取角色库实例"""
    return InMemoryPersonaStore()


def get_generation_handler(
    service: GenerationService = Depends(get_generation_service),
    persona_store: PersonaStore = Depends(get_persona_store),
) -> GenerationHandler:
    """获取生成处理器"""
    return GenerationHandler(service, persona_store)
