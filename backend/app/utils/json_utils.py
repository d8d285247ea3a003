"""
JSON工具模块
提供统一的JSON处理函数
"""

import json
import re
from typing import Any

_CODE_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


class ResponseParser:
    """响应解析器"""

    @staticmethod
    def strip_code_fence(ai_response: str) -> str:
        """去掉模型回复外层的Markdown代码块标记"""
        return _CODE_FENCE_PATTERN.sub("", ai_response.strip()).strip()

    @staticmethod
    def parse_json_response(ai_response: str) -> Any:
        """
        解析JSON格式的AI响应

        Args:
            ai_response: AI响应内容

        Returns:
            解析后的JSON数据（对象或数组）

        Raises:
            ValueError: 解析失败时抛出
        """
        if not ai_response or not ai_response.strip():
            raise ValueError("Failed to parse AI response as JSON: empty response")

        try:
            return json.loads(ResponseParser.strip_code_fence(ai_response))
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse AI response as JSON: {str(e)}") from e
