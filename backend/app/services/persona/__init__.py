"""
角色档案服务
"""

from .store import InMemoryPersonaStore, PersonaStore

__all__ = ["InMemoryPersonaStore", "PersonaStore"]
