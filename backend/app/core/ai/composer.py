"""
角色一致性上下文组装
把可选的角色档案（视觉描述、参考图、示例对话）合并进请求，不涉及任何I/O
"""

from dataclasses import replace
from typing import List, Optional, Sequence

from app.core.config import settings
from .models import ChatTurn, ImageAspectRatio, ImageQuality, Persona
from .requests import (
    ImageGenerateRequest,
    StoryboardPanelRequest,
    VideoGenerateRequest,
)

CHARACTER_REFERENCE_TEMPLATE = (
    "Character Reference: {descriptor}. \n\n"
    "Scene/Action: {text} \n\n"
    "Instruction: Ensure the character's visual details match the reference exactly."
)
CINEMATIC_PREFIX = "Cinematic shot. "
STORYBOARD_PANEL_TEMPLATE = "Storyboard panel, cinematic sketch style: {panel}. Context: {story}"
AVATAR_TEMPLATE = "Icon for character {name}. {descriptor}. Minimalist vector icon."


class ConsistencyContextComposer:
    """
    请求组装器

    优先级规则：
    - 没有角色时请求原样返回；
    - 图片请求在描述足够长时套用角色参考模板；
    - 视频请求优先使用角色参考图，此时不再注入描述文本；
    - 视频带首帧图时完全忽略角色。
    """

    def __init__(
        self,
        descriptor_min_length: Optional[int] = None,
        video_max_reference_images: Optional[int] = None,
    ):
        self.descriptor_min_length = (
            settings.persona_descriptor_min_length
            if descriptor_min_length is None else descriptor_min_length
        )
        self.video_max_reference_images = (
            settings.video_max_reference_images
            if video_max_reference_images is None else video_max_reference_images
        )

    def descriptor_of(self, persona: Optional[Persona]) -> Optional[str]:
        """返回可用的视觉描述，占位或过短的描述视为没有"""
        if persona is None or not persona.consistency_context:
            return None
        descriptor = persona.consistency_context.strip()
        if len(descriptor) <= self.descriptor_min_length:
            return None
        return descriptor

    def apply_descriptor(self, text: str, persona: Optional[Persona]) -> str:
        """把角色描述以参考模板的形式合并进提示词"""
        descriptor = self.descriptor_of(persona)
        if descriptor is None:
            return text
        return CHARACTER_REFERENCE_TEMPLATE.format(descriptor=descriptor, text=text)

    def compose_image(self, request: ImageGenerateRequest) -> ImageGenerateRequest:
        """组装文生图请求，返回不再携带角色的新请求"""
        if request.persona is None:
            return request
        return replace(
            request,
            prompt=self.apply_descriptor(request.prompt, request.persona),
            persona=None,
        )

    def compose_video(self, request: VideoGenerateRequest) -> VideoGenerateRequest:
        """组装视频请求，返回不再携带角色的新请求"""
        persona = request.persona
        prompt = request.prompt
        references = request.reference_images

        # 首帧模式下角色不参与；调用方已给出参考图时也不再合并角色
        if persona is not None and request.start_image is None and not references:
            if persona.reference_images:
                # 有参考图时不再注入描述文本
                references = persona.reference_images
            elif self.descriptor_of(persona) is not None:
                prompt = CINEMATIC_PREFIX + self.apply_descriptor(request.prompt, persona)

        references = tuple(references[:self.video_max_reference_images])
        if persona is None and references == tuple(request.reference_images):
            return request
        return replace(request, prompt=prompt, reference_images=references, persona=None)

    def compose_chat_history(
        self,
        persona: Optional[Persona],
        history: Sequence[ChatTurn] = (),
    ) -> List[ChatTurn]:
        """示例对话按顺序转为 user/model 轮次，放在调用方历史之前"""
        turns: List[ChatTurn] = []
        if persona is not None:
            for example in persona.examples:
                turns.append(ChatTurn(role="user", text=example.input))
                turns.append(ChatTurn(role="model", text=example.output))
        turns.extend(history)
        return turns

    def compose_storyboard_panel(self, request: StoryboardPanelRequest) -> ImageGenerateRequest:
        """把分镜画面请求展开为16:9的文生图请求"""
        prompt = STORYBOARD_PANEL_TEMPLATE.format(panel=request.panel, story=request.story)
        return self.compose_image(ImageGenerateRequest(
            prompt=prompt,
            aspect_ratio=ImageAspectRatio.WIDE,
            quality=ImageQuality.NORMAL,
            persona=request.persona,
        ))

    def compose_avatar(self, name: str, descriptor: Optional[str]) -> ImageGenerateRequest:
        """构建角色头像的文生图请求"""
        prompt = AVATAR_TEMPLATE.format(name=name, descriptor=(descriptor or "").strip())
        return ImageGenerateRequest(
            prompt=prompt,
            aspect_ratio=ImageAspectRatio.SQUARE,
            quality=ImageQuality.NORMAL,
        )
