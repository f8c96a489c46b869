"""模块说明：__init__。"""

from xhsbot.session.manager import PendingFullText, Session, SessionManager

__all__ = ["PendingFullText", "Session", "SessionManager"]
