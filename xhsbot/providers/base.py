"""模块说明：base。"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from xhsbot.errors import GenerationFailure


def extract_text(payload: Any) -> str:
    """从生成结果中取出文本。

    兼容三种形态：OpenAI 风格的 choices（litellm 默认返回），
    带 text 字段的简单结构，以及 Gemini 原生的 candidates/content/parts。
    都不存在时抛出 GenerationFailure。
    """
    choices = _field(payload, "choices")
    if choices:
        message = _field(choices[0], "message")
        content = _field(message, "content") if message is not None else None
        if isinstance(content, str) and content.strip():
            return content

    text = _field(payload, "text")
    if isinstance(text, str) and text.strip():
        return text

    candidates = _field(payload, "candidates")
    if candidates:
        content = _field(candidates[0], "content")
        parts = _field(content, "parts") if content is not None else None
        texts = [p for p in (_field(part, "text") for part in parts or []) if isinstance(p, str)]
        if texts and "".join(texts).strip():
            return "".join(texts)

    raise GenerationFailure(
        f"Generator response has no text (expected 'text', 'choices' or 'candidates'): "
        f"{type(payload).__name__}"
    )


def _field(obj: Any, name: str) -> Any:
    """函数说明：_field。"""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


class LLMProvider(ABC):
    """类说明：LLMProvider。"""

    def __init__(self, api_key: str | None = None, api_base: str | None = None):
        self.api_key = api_key
        self.api_base = api_base

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """根据完整提示词生成文本。

        失败时抛出 ConfigurationError、GenerationTimeout 或 GenerationFailure。
        """
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """函数说明：get_default_model。"""
        pass
