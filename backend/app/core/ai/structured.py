"""
结构化输出协调
请求模型返回JSON，按预期结构校验，解析失败时返回确定性的默认值
"""

import uuid
from typing import Awaitable, Callable, List, Optional, TypeVar

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.utils.json_utils import ResponseParser
from .models import PersonaExample, PersonaProfile, StructuredResult

logger = get_logger(__name__)

T = TypeVar("T")

TextCall = Callable[[types.Schema], Awaitable[str]]

STORYBOARD_FALLBACK = ("Scene 1", "Scene 2", "Scene 3", "Scene 4")

STORYBOARD_PLAN_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(type=types.Type.STRING),
)

PERSONA_PROFILE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "systemInstruction": types.Schema(type=types.Type.STRING),
        "consistencyContext": types.Schema(type=types.Type.STRING),
        "examples": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "input": types.Schema(type=types.Type.STRING),
                    "output": types.Schema(type=types.Type.STRING),
                },
            ),
        ),
    },
)

_scene_list_adapter = TypeAdapter(List[str])


class ExamplePayload(BaseModel):
    """模型返回的示例对话"""
    input: str = ""
    output: str = ""

    @field_validator("input", "output", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class PersonaProfilePayload(BaseModel):
    """模型返回的角色档案"""
    model_config = ConfigDict(populate_by_name=True)

    system_instruction: str = Field(default="", alias="systemInstruction")
    consistency_context: str = Field(default="", alias="consistencyContext")
    examples: List[ExamplePayload] = Field(default_factory=list)

    @field_validator("system_instruction", "consistency_context", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("examples", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v


def parse_storyboard_plan(text: str) -> List[str]:
    """
    解析分镜规划结果

    Raises:
        ValueError: 不是非空字符串数组
    """
    scenes = _scene_list_adapter.validate_python(ResponseParser.parse_json_response(text))
    scenes = [scene.strip() for scene in scenes]
    if not scenes or not all(scenes):
        raise ValueError("分镜规划结果为空或包含空白画面")
    return scenes


def parse_persona_profile(text: str) -> PersonaProfile:
    """
    解析角色档案结果，每个示例分配新的ID

    Raises:
        ValueError: 不是符合结构的JSON对象
    """
    payload = PersonaProfilePayload.model_validate(ResponseParser.parse_json_response(text))
    examples = tuple(
        PersonaExample(id=str(uuid.uuid4()), input=example.input, output=example.output)
        for example in payload.examples
    )
    return PersonaProfile(
        instruction=payload.system_instruction,
        consistency_context=payload.consistency_context,
        examples=examples,
    )


def fallback_persona_profile(name: str, description: str, visual_seed: Optional[str] = None) -> PersonaProfile:
    """根据输入构建确定性的默认角色档案"""
    return PersonaProfile(
        instruction=f"You are {name}. {description}".strip(),
        consistency_context=(visual_seed or "").strip(),
        examples=(),
    )


class StructuredOutputCoordinator:
    """
    结构化输出协调器

    只对解析和结构校验失败做降级；Provider调用本身的错误照常抛出。
    """

    async def request(
        self,
        task: str,
        call: TextCall,
        schema: types.Schema,
        parse: Callable[[str], T],
        fallback: Callable[[], T],
    ) -> StructuredResult[T]:
        """
        发起结构化请求并解析

        Args:
            task: 任务名称，用于日志
            call: 接收schema、返回模型原始文本的异步调用
            schema: 响应结构约束
            parse: 解析函数，失败时抛出ValueError
            fallback: 生成默认值的函数

        Returns:
            StructuredResult: 总是携带可用的值
        """
        text = await call(schema)
        try:
            return StructuredResult(value=parse(text or ""))
        except ValueError as e:
            logger.warning(
                log_messages.STRUCTURED_OUTPUT_FALLBACK,
                operation="structured_output",
                task=task,
                error=str(e)
            )
            return StructuredResult(value=fallback(), is_fallback=True, error=str(e))

    async def plan_storyboard(self, call: TextCall) -> StructuredResult[List[str]]:
        """分镜规划，失败时返回4个通用画面"""
        return await self.request(
            "storyboard_plan",
            call,
            STORYBOARD_PLAN_SCHEMA,
            parse_storyboard_plan,
            lambda: list(STORYBOARD_FALLBACK),
        )

    async def author_persona(
        self,
        call: TextCall,
        name: str,
        description: str,
        visual_seed: Optional[str] = None,
    ) -> StructuredResult[PersonaProfile]:
        """自动生成角色档案，失败时根据名称和描述构建默认档案"""
        return await self.request(
            "persona_profile",
            call,
            PERSONA_PROFILE_SCHEMA,
            parse_persona_profile,
            lambda: fallback_persona_profile(name, description, visual_seed),
        )
