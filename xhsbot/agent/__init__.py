"""模块说明：__init__。"""

from xhsbot.agent.commands import CommandRegistry, CommandSpec, build_default_registry
from xhsbot.agent.delivery import ReplyDelivery
from xhsbot.agent.loop import IngestionLoop
from xhsbot.agent.router import CommandRouter

__all__ = [
    "CommandRegistry",
    "CommandRouter",
    "CommandSpec",
    "IngestionLoop",
    "ReplyDelivery",
    "build_default_registry",
]
