"""消息拉取主循环模块。

IngestionLoop 以游标（offset）长轮询拉取一批事件，逐个交给 CommandRouter，
整批处理完后把游标推进到 max(cursor) + 1。拉取失败时固定退避后无限重试，
单个事件的失败只记日志，不会中断循环，也不会阻止游标推进。
"""

import asyncio

from loguru import logger

from xhsbot.agent.router import CommandRouter
from xhsbot.bus.events import InboundEvent
from xhsbot.channels.base import BaseChannel
from xhsbot.errors import TransportError

DEFAULT_POLL_TIMEOUT = 30
DEFAULT_RETRY_DELAY = 3.0


class IngestionLoop:
    """长轮询主循环。

    单协程、严格顺序：一次只等待一个拉取，批内事件逐个 await 完成
    （包括生成调用和回复发送）后才处理下一个。
    """

    def __init__(
        self,
        channel: BaseChannel,
        router: CommandRouter,
        offset: int = 0,
        poll_timeout: int = DEFAULT_POLL_TIMEOUT,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        drop_pending: bool = False,
    ):
        self.channel = channel
        self.router = router
        self.offset = offset
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.drop_pending = drop_pending
        self._running = False

    async def run(self) -> None:
        """启动主循环，直到 stop() 被调用。"""
        self._running = True
        logger.info(f"Ingestion loop started (offset={self.offset})")

        if self.drop_pending:
            await self._skip_backlog()

        while self._running:
            try:
                events = await self.channel.fetch_updates(self.offset, self.poll_timeout)
            except TransportError as e:
                logger.warning(f"Fetch failed, retrying in {self.retry_delay}s: {e}")
                await asyncio.sleep(self.retry_delay)
                continue
            except Exception as e:
                logger.exception(f"Unexpected fetch error, retrying in {self.retry_delay}s: {e}")
                await asyncio.sleep(self.retry_delay)
                continue

            await self.process_batch(events)

        logger.info("Ingestion loop stopped")

    def stop(self) -> None:
        """请求停止；当前拉取返回后退出。"""
        self._running = False
        logger.info("Ingestion loop stopping")

    async def process_batch(self, events: list[InboundEvent]) -> int:
        """顺序处理一批事件，返回实际分发的事件数。

        无论处理成功与否，游标都推进到本批最大 cursor + 1。
        """
        if not events:
            return 0

        dispatched = 0
        seen: set[int] = set()
        for event in sorted(events, key=lambda e: e.cursor):
            # 乱序或重复投递的旧事件直接跳过
            if event.cursor < self.offset or event.cursor in seen:
                logger.debug(f"Skipping already processed update {event.cursor}")
                continue
            seen.add(event.cursor)

            if not event.chat_id:
                continue
            if not self.channel.is_allowed(event.sender_id):
                logger.warning(
                    f"Access denied for sender {event.sender_id} on channel {self.channel.name}. "
                    f"Add them to allowFrom list in config to grant access."
                )
                continue

            try:
                await self.router.dispatch(event)
                dispatched += 1
            except Exception as e:
                logger.exception(f"Error processing update {event.cursor} from {event.chat_id}: {e}")

        self.offset = max(self.offset, max(e.cursor for e in events) + 1)
        return dispatched

    async def _skip_backlog(self) -> None:
        """启动时丢弃积压的更新：offset=-1 只返回最后一条，据此确认游标。"""
        try:
            events = await self.channel.fetch_updates(-1, 0)
        except TransportError as e:
            logger.warning(f"Could not drop pending updates: {e}")
            return
        if events:
            self.offset = max(self.offset, max(e.cursor for e in events) + 1)
            logger.info(f"Dropped pending updates up to {self.offset - 1}")
