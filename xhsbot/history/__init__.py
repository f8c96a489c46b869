"""模块说明：__init__。"""

from xhsbot.history.store import HistoryRecord, HistoryStore

__all__ = ["HistoryRecord", "HistoryStore"]
