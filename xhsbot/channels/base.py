"""模块说明：base。"""

from abc import ABC, abstractmethod
from typing import Any

from xhsbot.bus.events import InboundEvent, OutboundMessage


class BaseChannel(ABC):
    """消息传输抽象：长轮询拉取 + 发送 + 按钮应答。

    fetch_updates/send 出现网络问题时应抛出 TransportError。
    """

    name: str = "base"

    def __init__(self, config: Any):
        """函数说明：__init__。"""
        self.config = config
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """异步函数说明：start。"""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """异步函数说明：stop。"""
        pass

    @abstractmethod
    async def fetch_updates(self, offset: int, timeout: int) -> list[InboundEvent]:
        """拉取 cursor >= offset 的一批事件；没有事件时返回空列表。"""
        pass

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """异步函数说明：send。"""
        pass

    @abstractmethod
    async def answer_callback(self, callback_id: str) -> None:
        """异步函数说明：answer_callback。"""
        pass

    def is_allowed(self, sender_id: str) -> bool:
        """函数说明：is_allowed。"""
        allow_list = getattr(self.config, "allow_from", [])

        # 未配置白名单时放行所有人
        if not allow_list:
            return True

        sender_str = str(sender_id)
        if sender_str in allow_list:
            return True
        if "|" in sender_str:
            for part in sender_str.split("|"):
                if part and part in allow_list:
                    return True
        return False
