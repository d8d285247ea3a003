"""
JSON响应解析单元测试
"""

import pytest

from app.utils.json_utils import ResponseParser


@pytest.mark.unit
class TestResponseParser:
    """模型回复解析测试"""

    @pytest.mark.parametrize("text,expected", [
        ('["a", "b"]', '["a", "b"]'),
        ('```json\n["a", "b"]\n```', '["a", "b"]'),
        ('```\n{"k": 1}\n```', '{"k": 1}'),
        ('  ```JSON {"k": 1}```  ', '{"k": 1}'),
    ])
    def test_strip_code_fence(self, text, expected):
        assert ResponseParser.strip_code_fence(text) == expected

    def test_parse_array_and_object(self):
        assert ResponseParser.parse_json_response('```json\n["Scene A"]\n```') == ["Scene A"]
        assert ResponseParser.parse_json_response('{"systemInstruction": "x"}') == {"systemInstruction": "x"}

    @pytest.mark.parametrize("text", ["", "   ", "Sure! Here is the plan.", '["unterminated"'])
    def test_invalid_text_raises_value_error(self, text):
        with pytest.raises(ValueError):
            ResponseParser.parse_json_response(text)
