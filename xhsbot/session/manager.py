"""会话状态模块。

每个会话一份的临时状态：语言、是否已发送欢迎语、待展开的全文。
只存在内存中，进程重启即丢失；由分发器独占写入。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from loguru import logger

Language = Literal["zh", "en"]
DEFAULT_LANGUAGE: Language = "zh"


def resolve_language(hint: str | None) -> Language | None:
    """把 Telegram 的 language_code 映射为 zh/en；缺失时返回 None。"""
    if not hint:
        return None
    return "zh" if hint.lower().startswith("zh") else "en"


@dataclass(frozen=True)
class PendingFullText:
    """类说明：PendingFullText。"""
    text: str
    language: Language


@dataclass
class Session:
    """类说明：Session。"""

    key: str  # chat_id
    language: Language = DEFAULT_LANGUAGE
    greeted: bool = False
    pending_full_text: PendingFullText | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def apply_language_hint(self, hint: str | None) -> None:
        """函数说明：apply_language_hint。"""
        language = resolve_language(hint)
        if language:
            self.language = language
        self.updated_at = datetime.now()

    def set_pending(self, text: str) -> None:
        """保存被截断的全文；新截断直接覆盖旧的。"""
        if self.pending_full_text is not None:
            logger.debug(f"Session {self.key}: replacing pending full text")
        self.pending_full_text = PendingFullText(text=text, language=self.language)

    def take_pending(self) -> PendingFullText | None:
        """取出并清空待展开全文。"""
        pending = self.pending_full_text
        self.pending_full_text = None
        return pending


class SessionManager:
    """类说明：SessionManager。"""

    def __init__(self):
        self._cache: dict[str, Session] = {}

    def get_or_create(self, key: str) -> Session:
        """函数说明：get_or_create。"""
        session = self._cache.get(key)
        if session is None:
            session = Session(key=key)
            self._cache[key] = session
            logger.debug(f"Created session for {key}")
        return session

    def get(self, key: str) -> Session | None:
        """函数说明：get。"""
        return self._cache.get(key)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache
