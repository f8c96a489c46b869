"""模块说明：events。"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class InboundEvent:
    """类说明：InboundEvent。

    由传输层创建，IngestionLoop 消费一次，之后丢弃，不做修改。
    content 与 callback_data 互斥：后者来自按钮点击。
    """

    cursor: int  # Telegram update_id
    chat_id: str  # 会话标识
    content: str | None = None  # 消息文本
    callback_data: str | None = None  # 按钮回调数据
    callback_id: str | None = None  # 用于应答按钮点击
    language_hint: str | None = None  # 发送者 language_code
    sender_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """函数说明：text。"""
        raw = self.content if self.content is not None else self.callback_data
        return (raw or "").strip()

    @property
    def is_callback(self) -> bool:
        """函数说明：is_callback。"""
        return self.callback_id is not None


@dataclass
class OutboundMessage:
    """类说明：OutboundMessage。"""

    chat_id: str
    content: str
    # 每行若干 (文字, callback_data) 按钮
    buttons: list[list[tuple[str, str]]] = field(default_factory=list)
    format_html: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)
