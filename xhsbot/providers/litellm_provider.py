"""模块说明：litellm_provider。"""

import asyncio
import os
from typing import Any

import litellm
from litellm import acompletion
from loguru import logger

from xhsbot.errors import ConfigurationError, GenerationFailure, GenerationTimeout
from xhsbot.providers.base import LLMProvider, extract_text

TIMEOUT_MARKERS = ("timeout", "timed out", "deadline exceeded")


def is_timeout_error(error: BaseException) -> bool:
    """函数说明：is_timeout_error。"""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, litellm.Timeout)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in TIMEOUT_MARKERS)


class LiteLLMProvider(LLMProvider):
    """通过 litellm 调用生成后端，默认走 Gemini。"""

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "gemini/gemini-2.0-flash",
        max_tokens: int = 4096,
        temperature: float = 0.8,
        timeout: float = 60.0,
    ):
        super().__init__(api_key, api_base)
        self.default_model = default_model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

        # litellm 也会从环境变量读取凭据
        if api_key:
            model = default_model.lower()
            if "gemini" in model:
                os.environ.setdefault("GEMINI_API_KEY", api_key)
            elif "anthropic" in model or "claude" in model:
                os.environ.setdefault("ANTHROPIC_API_KEY", api_key)
            elif "openai" in model or "gpt" in model:
                os.environ.setdefault("OPENAI_API_KEY", api_key)

        if api_base:
            litellm.api_base = api_base

        litellm.suppress_debug_info = True

    async def generate(self, prompt: str) -> str:
        """异步函数说明：generate。"""
        if not self.api_key:
            raise ConfigurationError("Generator API key is not configured")

        model = self.default_model
        if "gemini" in model.lower() and not model.startswith("gemini/"):
            model = f"gemini/{model}"

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "api_key": self.api_key,
        }
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            response = await asyncio.wait_for(acompletion(**kwargs), timeout=self.timeout)
        except Exception as e:
            if is_timeout_error(e):
                logger.warning(f"Generation timed out after {self.timeout}s ({model})")
                raise GenerationTimeout(str(e) or f"no response within {self.timeout}s") from e
            logger.error(f"Error calling generator {model}: {e}")
            raise GenerationFailure(str(e)) from e

        return extract_text(response)

    def get_default_model(self) -> str:
        """函数说明：get_default_model。"""
        return self.default_model
