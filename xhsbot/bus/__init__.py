"""模块说明：__init__。"""

from xhsbot.bus.events import InboundEvent, OutboundMessage

__all__ = ["InboundEvent", "OutboundMessage"]
