"""长回复投递模块。

按固定顺序决定一条回复怎么发（先命中者生效）：
1. UTF-8 字节数超过单条上限：按字符边界分页，第 2 页起加「[page N]」前缀；
2. 字符数超过预览阈值：只发前 preview_chars 个字符 + 提示，全文存入会话；
3. 其他情况原样发送。
"""

from loguru import logger

from xhsbot.agent.commands import FULL_TEXT_CALLBACK
from xhsbot.agent.messages import t
from xhsbot.bus.events import OutboundMessage
from xhsbot.channels.base import BaseChannel
from xhsbot.session.manager import Session
from xhsbot.utils.helpers import split_utf8, utf8_len

MAX_MESSAGE_BYTES = 4000
PREVIEW_CHARS = 600


def page_marker(page: int) -> str:
    """函数说明：page_marker。"""
    return f"[page {page}]\n"


def paginate(text: str, max_bytes: int = MAX_MESSAGE_BYTES) -> list[str]:
    """把超长文本切成若干页，每页（含页码前缀）都不超过 max_bytes 字节。"""
    # 页码前缀随页数变长，按一个足够宽的前缀预留空间
    reserve = utf8_len(page_marker(10 ** 6))
    if max_bytes <= reserve:
        raise ValueError(f"max_bytes must exceed {reserve}")
    chunks = split_utf8(text, max_bytes - reserve, first_limit=max_bytes)
    return [chunk if i == 0 else page_marker(i + 1) + chunk for i, chunk in enumerate(chunks)]


class ReplyDelivery:
    """类说明：ReplyDelivery。"""

    def __init__(
        self,
        channel: BaseChannel,
        max_message_bytes: int = MAX_MESSAGE_BYTES,
        preview_chars: int = PREVIEW_CHARS,
    ):
        self.channel = channel
        self.max_message_bytes = max_message_bytes
        self.preview_chars = preview_chars

    async def deliver(self, chat_id: str, text: str, session: Session) -> list[OutboundMessage]:
        """发送一条任意长度的回复，返回实际发出的消息。"""
        if utf8_len(text) > self.max_message_bytes:
            pages = paginate(text, self.max_message_bytes)
            logger.info(f"Paginating reply to {chat_id} into {len(pages)} messages")
            messages = [OutboundMessage(chat_id=chat_id, content=page) for page in pages]
        elif len(text) > self.preview_chars:
            session.set_pending(text)
            preview = text[: self.preview_chars] + t("preview_tip", session.language)
            messages = [OutboundMessage(
                chat_id=chat_id,
                content=preview,
                buttons=[[(t("full_text_button", session.language), FULL_TEXT_CALLBACK)]],
            )]
            logger.debug(f"Sent preview to {chat_id}, {len(text)} chars pending")
        else:
            messages = [OutboundMessage(chat_id=chat_id, content=text)]

        for msg in messages:
            await self.channel.send(msg)
        return messages

    async def deliver_full_text(self, chat_id: str, session: Session) -> OutboundMessage | None:
        """发送并清空会话里待展开的全文；没有时返回 None。"""
        pending = session.take_pending()
        if pending is None:
            return None
        msg = OutboundMessage(chat_id=chat_id, content=pending.text)
        await self.channel.send(msg)
        return msg

    async def send_text(self, chat_id: str, text: str, buttons: list[list[tuple[str, str]]] | None = None) -> OutboundMessage:
        """发送短的系统提示（菜单、错误提示等），不经过预览逻辑。"""
        msg = OutboundMessage(chat_id=chat_id, content=text, buttons=buttons or [])
        await self.channel.send(msg)
        return msg
