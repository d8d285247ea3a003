"""
角色档案存储
生成核心只读取角色，保存与删除由外部流程负责
"""

import time
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

from app.core.ai.models import Persona
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class PersonaStore(ABC):
    """角色存储接口"""

    @abstractmethod
    async def list_all(self) -> List[Persona]:
        """列出全部角色，按最近修改时间倒序"""

    @abstractmethod
    async def save(self, persona: Persona) -> None:
        """新增或覆盖角色"""

    @abstractmethod
    async def delete_by_id(self, persona_id: str) -> None:
        """删除角色，不存在时忽略"""

    async def get_by_id(self, persona_id: str) -> Optional[Persona]:
        """按ID查找角色"""
        for persona in await self.list_all():
            if persona.id == persona_id:
                return persona
        return None


class InMemoryPersonaStore(PersonaStore):
    """进程内角色存储"""

    def __init__(self):
        self._personas: Dict[str, Persona] = {}

    async def list_all(self) -> List[Persona]:
        return sorted(self._personas.values(), key=lambda p: p.last_modified, reverse=True)

    async def save(self, persona: Persona) -> None:
        if not persona.last_modified:
            persona = replace(persona, last_modified=time.time())
        self._personas[persona.id] = persona
        logger.info(log_messages.PERSONA_SAVED, operation="persona_save", persona_id=persona.id)

    async def delete_by_id(self, persona_id: str) -> None:
        if self._personas.pop(persona_id, None) is not None:
            logger.info(log_messages.PERSONA_DELETED, operation="persona_delete", persona_id=persona_id)
