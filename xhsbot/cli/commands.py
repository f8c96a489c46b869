"""命令行入口。"""

import asyncio
import signal
from pathlib import Path

import click
from loguru import logger

from xhsbot import __logo__, __version__
from xhsbot.agent.delivery import ReplyDelivery
from xhsbot.agent.loop import IngestionLoop
from xhsbot.agent.router import CommandRouter
from xhsbot.channels.base import BaseChannel
from xhsbot.channels.telegram import TelegramChannel
from xhsbot.config.loader import get_config_path, load_config, save_config
from xhsbot.config.schema import Config
from xhsbot.history.store import HistoryStore
from xhsbot.providers.base import LLMProvider
from xhsbot.providers.litellm_provider import LiteLLMProvider
from xhsbot.utils.helpers import setup_logging, truncate_string


def build_loop(
    config: Config,
    channel: BaseChannel | None = None,
    provider: LLMProvider | None = None,
    history: HistoryStore | None = None,
) -> IngestionLoop:
    """按配置组装 channel -> delivery -> router -> loop。"""
    channel = channel or TelegramChannel(config.telegram)
    provider = provider or LiteLLMProvider(
        api_key=config.provider.api_key or None,
        api_base=config.provider.api_base,
        default_model=config.provider.model,
        max_tokens=config.provider.max_tokens,
        temperature=config.provider.temperature,
        timeout=config.provider.timeout,
    )
    history = history or HistoryStore(config.history_path, cap=config.history.cap)
    delivery = ReplyDelivery(
        channel,
        max_message_bytes=config.delivery.max_message_bytes,
        preview_chars=config.delivery.preview_chars,
    )
    router = CommandRouter(provider, delivery, history, display_limit=config.history.display_limit)
    return IngestionLoop(
        channel,
        router,
        poll_timeout=config.telegram.poll_timeout,
        retry_delay=config.telegram.retry_delay,
        drop_pending=config.telegram.drop_pending,
    )


async def _serve(config: Config) -> None:
    """异步函数说明：_serve。"""
    loop = build_loop(config)
    await loop.channel.start()

    running = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            running.add_signal_handler(sig, loop.stop)
        except NotImplementedError:
            # Windows 不支持 add_signal_handler
            pass

    try:
        await loop.run()
    finally:
        await loop.channel.stop()


@click.group()
@click.version_option(__version__, prog_name="xhsbot")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to config.json (default: ~/.xhsbot/config.json)")
@click.option("--log-level", default="INFO", help="Log level")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str) -> None:
    """Xiaohongshu copywriting assistant for Telegram."""
    setup_logging(log_level)
    ctx.obj = {"config_path": config_path, "config": load_config(config_path)}


@cli.command()
@click.pass_obj
def run(obj: dict) -> None:
    """Start polling Telegram and answering commands."""
    config: Config = obj["config"]
    if not config.telegram.token:
        raise click.ClickException("Telegram token missing: set telegram.token or TELEGRAM_BOT_TOKEN")
    if not config.provider.api_key:
        logger.warning("Generator API key missing: generation commands will report a configuration error")

    click.echo(f"{__logo__} xhsbot {__version__} starting (model: {config.provider.model})")
    asyncio.run(_serve(config))


@cli.command()
@click.argument("conversation_id")
@click.option("--limit", default=10, show_default=True, help="Number of records")
@click.pass_obj
def history(obj: dict, conversation_id: str, limit: int) -> None:
    """Show recent generations for a conversation."""
    config: Config = obj["config"]
    store = HistoryStore(config.history_path, cap=config.history.cap)
    records = store.recent(conversation_id, limit)
    if not records:
        click.echo("No records.")
        return
    for record in records:
        click.echo(f"{record.time}  {record.command_type:<10} {record.topic}")
        click.echo(f"    {truncate_string(record.result.strip().replace(chr(10), ' '), 100)}")


@cli.command()
@click.argument("keyword")
@click.option("--conversation", "conversation_id", default=None, help="Limit to one conversation")
@click.option("--limit", default=10, show_default=True, help="Number of records")
@click.pass_obj
def search(obj: dict, keyword: str, conversation_id: str | None, limit: int) -> None:
    """Search recorded topics and results."""
    config: Config = obj["config"]
    store = HistoryStore(config.history_path, cap=config.history.cap)
    matches = store.search(keyword, conversation_id)
    if not matches:
        click.echo("No records.")
        return
    for record in reversed(matches[-limit:]):
        click.echo(f"{record.time}  [{record.conversation_id}] {record.command_type} {record.topic}")


@cli.command("init-config")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_obj
def init_config(obj: dict, force: bool) -> None:
    """Write a config file with default values."""
    path = obj["config_path"] or get_config_path()
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    save_config(Config(), path)
    click.echo(f"Wrote default configuration to {path}")
