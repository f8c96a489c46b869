"""模块说明：__init__。"""

from xhsbot.channels.base import BaseChannel
from xhsbot.channels.telegram import TelegramChannel

__all__ = ["BaseChannel", "TelegramChannel"]
