"""xhsbot - 小红书文案 Telegram 助手。"""

__version__ = "0.1.0"
__logo__ = "🧃"
