"""共享测试夹具：假的传输层与生成后端，不访问网络。"""

from collections import deque
from typing import Callable

import pytest

from xhsbot.agent.delivery import ReplyDelivery
from xhsbot.agent.router import CommandRouter
from xhsbot.bus.events import InboundEvent, OutboundMessage
from xhsbot.channels.base import BaseChannel
from xhsbot.errors import TransportError
from xhsbot.history.store import HistoryStore
from xhsbot.providers.base import LLMProvider


class FakeChannel(BaseChannel):
    """记录发出的消息；fetch 按预设脚本返回批次或抛出异常。"""

    name = "fake"

    def __init__(self, batches=None, allow_from=None):
        super().__init__(type("Cfg", (), {"allow_from": allow_from or []})())
        self.batches = deque(batches or [])
        self.sent: list[OutboundMessage] = []
        self.answered: list[str] = []
        self.fetch_offsets: list[int] = []
        self.fail_sends = False
        self.on_empty: Callable[[], None] | None = None

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    async def fetch_updates(self, offset: int, timeout: int) -> list[InboundEvent]:
        self.fetch_offsets.append(offset)
        if not self.batches:
            if self.on_empty:
                self.on_empty()
            return []
        batch = self.batches.popleft()
        if isinstance(batch, Exception):
            raise batch
        return batch

    async def send(self, msg: OutboundMessage) -> None:
        if self.fail_sends:
            raise TransportError("send failed")
        self.sent.append(msg)

    async def answer_callback(self, callback_id: str) -> None:
        self.answered.append(callback_id)

    @property
    def texts(self) -> list[str]:
        return [m.content for m in self.sent]


class FakeProvider(LLMProvider):
    """按主题返回固定文本，可按提示词注入异常。"""

    def __init__(self, reply: str | Callable[[str], str] = "生成结果"):
        super().__init__(api_key="test-key")
        self.reply = reply
        self.prompts: list[str] = []
        self.errors: dict[str, Exception] = {}

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        for marker, error in self.errors.items():
            if marker in prompt:
                raise error
        return self.reply(prompt) if callable(self.reply) else self.reply

    def get_default_model(self) -> str:
        return "fake/model"


def make_event(cursor: int, text: str | None = None, chat_id: str = "100", **kwargs) -> InboundEvent:
    return InboundEvent(cursor=cursor, chat_id=chat_id, content=text, **kwargs)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def history() -> HistoryStore:
    return HistoryStore()


@pytest.fixture
def router(channel, provider, history) -> CommandRouter:
    return CommandRouter(provider, ReplyDelivery(channel), history)
