"""模块说明：__init__。"""

from xhsbot.providers.base import LLMProvider, extract_text
from xhsbot.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LiteLLMProvider", "extract_text"]
