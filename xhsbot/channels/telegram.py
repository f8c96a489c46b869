"""模块说明：telegram。"""

import re

from loguru import logger
from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest, TelegramError
from telegram.request import HTTPXRequest

from xhsbot.bus.events import InboundEvent, OutboundMessage
from xhsbot.channels.base import BaseChannel
from xhsbot.config.schema import TelegramConfig
from xhsbot.errors import TransportError


def _markdown_to_telegram_html(text: str) -> str:
    """把模型输出的 Markdown 转成 Telegram 支持的 HTML 子集。"""
    if not text:
        return ""

    # 先抽出代码块，避免被后续规则改写
    code_blocks: list[str] = []
    def save_code_block(m: re.Match) -> str:
        code_blocks.append(m.group(1))
        return f"\x00CB{len(code_blocks) - 1}\x00"

    text = re.sub(r'```[\w]*\n?([\s\S]*?)```', save_code_block, text)

    inline_codes: list[str] = []
    def save_inline_code(m: re.Match) -> str:
        inline_codes.append(m.group(1))
        return f"\x00IC{len(inline_codes) - 1}\x00"

    text = re.sub(r'`([^`]+)`', save_inline_code, text)

    # 标题、引用只保留文字
    text = re.sub(r'^#{1,6}\s+(.+)$', r'\1', text, flags=re.MULTILINE)
    text = re.sub(r'^>\s*(.*)$', r'\1', text, flags=re.MULTILINE)

    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

    text = re.sub(r'\[([^\]]+)\]\(([^)]+)\)', r'<a href="\2">\1</a>', text)
    text = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', text)
    text = re.sub(r'__(.+?)__', r'<b>\1</b>', text)
    text = re.sub(r'(?<![a-zA-Z0-9])_([^_]+)_(?![a-zA-Z0-9])', r'<i>\1</i>', text)
    text = re.sub(r'~~(.+?)~~', r'<s>\1</s>', text)
    text = re.sub(r'^[-*]\s+', '• ', text, flags=re.MULTILINE)

    for i, code in enumerate(inline_codes):
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        text = text.replace(f"\x00IC{i}\x00", f"<code>{escaped}</code>")

    for i, code in enumerate(code_blocks):
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        text = text.replace(f"\x00CB{i}\x00", f"<pre><code>{escaped}</code></pre>")

    return text


def update_to_event(update: Update) -> InboundEvent | None:
    """把 Telegram Update 转成 InboundEvent；不关心的更新类型返回 None。"""
    if update.callback_query is not None:
        query = update.callback_query
        user = query.from_user
        chat_id = query.message.chat.id if query.message else user.id
        return InboundEvent(
            cursor=update.update_id,
            chat_id=str(chat_id),
            callback_data=query.data or "",
            callback_id=str(query.id),
            language_hint=user.language_code,
            sender_id=_sender_id(user),
        )

    message = update.message
    if message is None:
        return None

    user = message.from_user
    return InboundEvent(
        cursor=update.update_id,
        chat_id=str(message.chat_id),
        content=message.text,
        language_hint=user.language_code if user else None,
        sender_id=_sender_id(user) if user else "",
        metadata={
            "message_id": message.message_id,
            "is_group": message.chat.type != "private",
        },
    )


def _sender_id(user) -> str:
    """函数说明：_sender_id。"""
    sender_id = str(user.id)
    if user.username:
        sender_id = f"{sender_id}|{user.username}"
    return sender_id


class TelegramChannel(BaseChannel):
    """基于 getUpdates 长轮询的 Telegram 传输层，游标由 IngestionLoop 管理。"""

    name = "telegram"

    def __init__(self, config: TelegramConfig, bot: Bot | None = None):
        super().__init__(config)
        self.config: TelegramConfig = config
        self._bot: Bot | None = bot

    async def start(self) -> None:
        """异步函数说明：start。"""
        if self._bot is None:
            if not self.config.token:
                raise TransportError("Telegram bot token not configured")
            request = HTTPXRequest(proxy=self.config.proxy) if self.config.proxy else None
            self._bot = Bot(self.config.token, request=request)

        try:
            await self._bot.initialize()
            bot_info = await self._bot.get_me()
        except TelegramError as e:
            raise TransportError(f"Telegram connection failed: {e}") from e

        self._running = True
        logger.info(f"Telegram bot @{bot_info.username} connected")

    async def stop(self) -> None:
        """异步函数说明：stop。"""
        self._running = False
        if self._bot:
            logger.info("Stopping Telegram bot...")
            try:
                await self._bot.shutdown()
            except TelegramError as e:
                logger.warning(f"Error during Telegram shutdown: {e}")

    @property
    def bot(self) -> Bot:
        """函数说明：bot。"""
        if self._bot is None:
            raise TransportError("Telegram bot not running")
        return self._bot

    async def fetch_updates(self, offset: int, timeout: int) -> list[InboundEvent]:
        """异步函数说明：fetch_updates。"""
        try:
            updates = await self.bot.get_updates(
                offset=offset,
                timeout=timeout,
                allowed_updates=["message", "callback_query"],
            )
        except TelegramError as e:
            raise TransportError(f"getUpdates failed: {e}") from e

        events = []
        for update in updates:
            event = update_to_event(update)
            if event is None:
                # 不处理的更新也要推进游标
                event = InboundEvent(cursor=update.update_id, chat_id="")
            events.append(event)
        return events

    async def send(self, msg: OutboundMessage) -> None:
        """先按 HTML 发送，解析失败时退回纯文本。"""
        try:
            chat_id = int(msg.chat_id)
        except ValueError:
            logger.error(f"Invalid chat_id: {msg.chat_id}")
            return

        markup = None
        if msg.buttons:
            markup = InlineKeyboardMarkup([
                [InlineKeyboardButton(label, callback_data=data) for label, data in row]
                for row in msg.buttons
            ])

        try:
            if msg.format_html:
                try:
                    await self.bot.send_message(
                        chat_id=chat_id,
                        text=_markdown_to_telegram_html(msg.content),
                        parse_mode="HTML",
                        reply_markup=markup,
                    )
                    return
                except BadRequest as e:
                    logger.warning(f"HTML parse failed, falling back to plain text: {e}")

            await self.bot.send_message(
                chat_id=chat_id,
                text=msg.content,
                reply_markup=markup,
            )
        except TelegramError as e:
            raise TransportError(f"sendMessage to {chat_id} failed: {e}") from e

    async def answer_callback(self, callback_id: str) -> None:
        """异步函数说明：answer_callback。"""
        try:
            await self.bot.answer_callback_query(callback_id)
        except TelegramError as e:
            raise TransportError(f"answerCallbackQuery failed: {e}") from e
