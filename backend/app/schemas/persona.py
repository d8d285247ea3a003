"""
角色档案相关的Pydantic数据模型
"""

import time
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.ai.models import MediaInput, Persona, PersonaExample, PersonaProfile


class PersonaExampleSchema(BaseModel):
    """少样本对话示例"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="示例ID")
    input: str = Field(default="", description="用户输入")
    output: str = Field(default="", description="角色回复")


class PersonaSchema(BaseModel):
    """角色档案"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="角色ID")
    name: str = Field(..., min_length=1, description="角色名称")
    instruction: str = Field(default="", description="角色行为指令")
    consistency_context: Optional[str] = Field(None, description="视觉一致性描述")
    examples: List[PersonaExampleSchema] = Field(default_factory=list, description="少样本对话示例（有序）")
    reference_images: List[str] = Field(
        default_factory=list,
        max_length=4,
        description="参考图，base64或data URI，最多4张"
    )
    last_modified: float = Field(default_factory=time.time, description="最后修改时间戳")
    avatar: Optional[str] = Field(None, description="头像data URI")

    def to_persona(self) -> Persona:
        """转换为核心层的角色对象"""
        return Persona(
            id=self.id,
            name=self.name,
            instruction=self.instruction,
            consistency_context=self.consistency_context,
            examples=tuple(
                PersonaExample(id=example.id, input=example.input, output=example.output)
                for example in self.examples
            ),
            reference_images=tuple(MediaInput.from_base64(image) for image in self.reference_images),
            last_modified=self.last_modified,
            avatar=self.avatar,
        )


class PersonaProfileData(BaseModel):
    """自动生成的角色档案"""
    instruction: str = Field(..., description="角色行为指令")
    consistency_context: str = Field(..., description="视觉一致性描述")
    examples: List[PersonaExampleSchema] = Field(default_factory=list, description="示例对话")
    is_fallback: bool = Field(default=False, description="是否为解析失败后的默认档案")

    @classmethod
    def from_profile(cls, profile: PersonaProfile, is_fallback: bool = False) -> "PersonaProfileData":
        return cls(
            instruction=profile.instruction,
            consistency_context=profile.consistency_context,
            examples=[
                PersonaExampleSchema(id=example.id, input=example.input, output=example.output)
                for example in profile.examples
            ],
            is_fallback=is_fallback,
        )
