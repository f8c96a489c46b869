"""命令路由模块。

CommandRouter 负责单个事件的完整处理：更新会话、全文请求、欢迎语、
命令解析与分发，并把处理器抛出的错误统一转换成本地化提示。
除发送失败（TransportError）外，任何错误都不会向上传给 IngestionLoop。
"""

from loguru import logger

from xhsbot.agent.commands import (
    CommandRegistry,
    CommandSpec,
    build_default_registry,
    is_full_text_trigger,
    parse_command,
    split_batch_topics,
)
from xhsbot.agent.delivery import ReplyDelivery
from xhsbot.agent.messages import BATCH_DIVIDER, t
from xhsbot.bus.events import InboundEvent
from xhsbot.errors import (
    ConfigurationError,
    GenerationError,
    GenerationTimeout,
    TransportError,
    UserInputError,
)
from xhsbot.history.store import HistoryRecord, HistoryStore
from xhsbot.providers.base import LLMProvider
from xhsbot.session.manager import Session, SessionManager
from xhsbot.utils.helpers import truncate_string

# /export 整合顺序：(命令类型, 小节标题)
EXPORT_SECTIONS = [
    ("/title", {"zh": "✍️ 爆款标题", "en": "✍️ Titles"}),
    ("/cover", {"zh": "🎨 封面文案", "en": "🎨 Cover captions"}),
    ("/post", {"zh": "📝 图文内容", "en": "📝 Post"}),
    ("/tags", {"zh": "🏷️ 热门标签", "en": "🏷️ Hashtags"}),
]

BATCH_COMMAND_TYPE = "/batch"
COVER_COMMAND_TYPE = "/cover"


class CommandRouter:
    """单事件处理器。

    sessions 与 history 只在事件处理路径上被修改，事件严格顺序处理，因此无需加锁。
    """

    def __init__(
        self,
        provider: LLMProvider,
        delivery: ReplyDelivery,
        history: HistoryStore,
        sessions: SessionManager | None = None,
        commands: CommandRegistry | None = None,
        display_limit: int = 5,
    ):
        self.provider = provider
        self.delivery = delivery
        self.history = history
        self.sessions = sessions or SessionManager()
        self.commands = commands or build_default_registry()
        self.display_limit = display_limit

    async def dispatch(self, event: InboundEvent) -> None:
        """处理一个入站事件。"""
        session = self.sessions.get_or_create(event.chat_id)
        session.apply_language_hint(event.language_hint)

        if event.is_callback:
            try:
                await self.delivery.channel.answer_callback(event.callback_id)
            except TransportError as e:
                logger.warning(f"Failed to acknowledge callback {event.callback_id}: {e}")

        text = event.text

        full_text_requested = is_full_text_trigger(text)

        # 有待展开的全文时，全文请求优先于其他一切路由
        if full_text_requested and session.pending_full_text is not None:
            await self.delivery.deliver_full_text(event.chat_id, session)
            logger.info(f"Delivered full text to {event.chat_id}")
            return

        if not session.greeted:
            session.greeted = True
            await self._send_welcome(event.chat_id, session)

        if full_text_requested:
            await self.delivery.send_text(event.chat_id, t("no_pending", session.language))
            return

        if not text:
            return

        parsed = parse_command(text)
        if parsed is None:
            logger.debug(f"Ignoring non-command message from {event.chat_id}: {truncate_string(text, 50)}")
            return

        spec = self.commands.get(parsed.name)
        if spec is None:
            suggestion = self.commands.suggest(parsed.name)
            if suggestion:
                await self.delivery.send_text(
                    event.chat_id, t("did_you_mean", session.language, suggestion=suggestion)
                )
            else:
                logger.debug(f"Ignoring unknown command {parsed.name} from {event.chat_id}")
            return

        logger.info(f"Command {spec.name} from {event.chat_id}: {truncate_string(parsed.argument, 50)}")
        try:
            await self._run(spec, parsed.argument, event.chat_id, session)
        except UserInputError as e:
            usage = self.commands.get(e.command).usage() if e.command in self.commands else e.command
            await self.delivery.send_text(event.chat_id, t(e.kind, session.language, usage=usage))
        except GenerationTimeout as e:
            logger.warning(f"Generation timed out for {spec.name} in {event.chat_id}: {e}")
            await self.delivery.send_text(event.chat_id, t("generation_timeout", session.language))
        except ConfigurationError as e:
            logger.error(f"Cannot run {spec.name}: {e}")
            await self.delivery.send_text(event.chat_id, t("not_configured", session.language))
        except GenerationError as e:
            logger.error(f"Generation failed for {spec.name} in {event.chat_id}: {e}")
            await self.delivery.send_text(event.chat_id, t("generation_failed", session.language))

    async def _run(self, spec: CommandSpec, argument: str, chat_id: str, session: Session) -> None:
        """按命令类型分发；参数缺失时抛出 UserInputError。"""
        if spec.argument_required and not argument:
            if spec.kind == "search":
                kind = UserInputError.EMPTY_KEYWORD
            elif spec.name == "/reply":
                kind = UserInputError.EMPTY_CONTENT
            else:
                kind = UserInputError.ARGUMENT_REQUIRED
            raise UserInputError(kind, spec.name)

        if spec.kind == "generate":
            await self._generate(spec, argument, chat_id, session)
        elif spec.kind == "batch":
            await self._batch(spec, argument, chat_id, session)
        elif spec.kind == "search":
            await self._search(argument, chat_id, session)
        elif spec.kind == "history":
            await self._recent(chat_id, session)
        elif spec.kind == "export":
            await self._export(argument, chat_id, session)
        elif spec.kind == "coverimage":
            await self._cover_image(argument, chat_id, session)
        elif spec.kind == "menu":
            await self._send_menu(chat_id, session)
        elif spec.kind == "help":
            await self.delivery.send_text(chat_id, t("help", session.language))

    async def _generate(self, spec: CommandSpec, topic: str, chat_id: str, session: Session) -> None:
        """异步函数说明：_generate。"""
        result = await self.provider.generate(spec.build_prompt(topic, session.language))
        self.history.append(HistoryRecord(
            conversation_id=chat_id,
            command_type=spec.name,
            topic=topic,
            result=result,
        ))
        await self.delivery.deliver(chat_id, result, session)

    async def _batch(self, spec: CommandSpec, argument: str, chat_id: str, session: Session) -> None:
        """逐个主题生成标题，汇总成一条回复；单个主题失败不影响其他主题。"""
        topics = split_batch_topics(argument)
        if not topics:
            raise UserInputError(UserInputError.ARGUMENT_REQUIRED, spec.name)

        sections = []
        for index, topic in enumerate(topics, start=1):
            logger.info(f"Batch [{index}/{len(topics)}] {topic}")
            try:
                result = await self.provider.generate(spec.build_prompt(topic, session.language))
            except GenerationError as e:
                logger.warning(f"Batch topic {topic!r} failed: {e}")
                reason = t("generation_timeout" if isinstance(e, GenerationTimeout) else "generation_failed",
                           session.language)
                sections.append(f"【{topic}】\n{t('batch_item_failed', session.language, reason=reason)}")
                continue

            self.history.append(HistoryRecord(
                conversation_id=chat_id,
                command_type=BATCH_COMMAND_TYPE,
                topic=topic,
                result=result,
            ))
            sections.append(f"【{topic}】\n{result.strip()}")

        reply = t("batch_header", session.language, count=len(topics)) + "\n\n" + BATCH_DIVIDER.join(sections)
        await self.delivery.deliver(chat_id, reply, session)

    async def _search(self, keyword: str, chat_id: str, session: Session) -> None:
        """异步函数说明：_search。"""
        matches = self.history.search(keyword, chat_id)
        if not matches:
            await self.delivery.send_text(chat_id, t("no_records", session.language))
            return
        latest = list(reversed(matches[-self.display_limit:]))
        reply = t("search_header", session.language, keyword=keyword) + "\n\n" + self._format_records(latest)
        await self.delivery.deliver(chat_id, reply, session)

    async def _recent(self, chat_id: str, session: Session) -> None:
        """异步函数说明：_recent。"""
        records = self.history.recent(chat_id, self.display_limit)
        if not records:
            await self.delivery.send_text(chat_id, t("no_records", session.language))
            return
        reply = t("history_header", session.language) + "\n\n" + self._format_records(records)
        await self.delivery.deliver(chat_id, reply, session)

    async def _export(self, topic: str, chat_id: str, session: Session) -> None:
        """把同一主题最近的标题、封面、正文、标签整合成一篇笔记。"""
        parts = []
        for command_type, titles in EXPORT_SECTIONS:
            record = self.history.latest(chat_id, command_type, topic)
            if record is None and command_type == "/title":
                record = self.history.latest(chat_id, BATCH_COMMAND_TYPE, topic)
            if record is not None:
                parts.append(f"【{titles.get(session.language, titles['zh'])}】\n\n{record.result.strip()}")

        if not parts:
            await self.delivery.send_text(chat_id, t("nothing_to_export", session.language, topic=topic))
            return

        header = t("export_header", session.language, topic=topic)
        reply = f"{header}\n\n" + "\n\n---\n\n".join(parts)
        await self.delivery.deliver(chat_id, reply, session)

    async def _cover_image(self, topic: str, chat_id: str, session: Session) -> None:
        """用该主题最近一次 /cover 结果的第一行，给出封面图建议。"""
        record = self.history.latest(chat_id, COVER_COMMAND_TYPE, topic)
        caption = ""
        if record is not None:
            caption = next((line.strip() for line in record.result.splitlines() if line.strip()), "")
        if not caption:
            await self.delivery.send_text(chat_id, t("cover_image_missing", session.language, topic=topic))
            return
        await self.delivery.send_text(
            chat_id, t("cover_image_suggestion", session.language, topic=topic, caption=caption)
        )

    @staticmethod
    def _format_records(records: list[HistoryRecord]) -> str:
        """函数说明：_format_records。"""
        lines = []
        for record in records:
            when = record.time[:16].replace("T", " ")
            lines.append(
                f"• {when} {record.command_type} 「{record.topic}」\n"
                f"  {truncate_string(record.result.strip().replace(chr(10), ' '), 80)}"
            )
        return "\n".join(lines)

    def _menu_text(self, language: str) -> str:
        """函数说明：_menu_text。"""
        lines = [t("menu_header", language), ""]
        for spec in self.commands.specs():
            description = spec.description.get(language) or spec.description.get("zh", "")
            lines.append(f"{spec.name} - {description}")
        return "\n".join(lines)

    async def _send_menu(self, chat_id: str, session: Session) -> None:
        """异步函数说明：_send_menu。"""
        await self.delivery.send_text(
            chat_id,
            self._menu_text(session.language),
            buttons=[[("/history", "/history"), ("/xhs-help", "/xhs-help")]],
        )

    async def _send_welcome(self, chat_id: str, session: Session) -> None:
        """异步函数说明：_send_welcome。"""
        await self.delivery.send_text(
            chat_id,
            t("welcome", session.language) + "\n\n" + self._menu_text(session.language),
            buttons=[[("/menu", "/menu"), ("/history", "/history"), ("/xhs-help", "/xhs-help")]],
        )
