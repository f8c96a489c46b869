"""模块说明：schema。"""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelegramConfig(BaseModel):
    """类说明：TelegramConfig。"""
    token: str = ""  # Bot token from @BotFather
    allow_from: list[str] = Field(default_factory=list)  # Allowed user IDs or usernames
    proxy: str | None = None  # HTTP/SOCKS5 proxy URL, e.g. "http://127.0.0.1:7890"
    poll_timeout: int = 30  # getUpdates long-poll seconds
    retry_delay: float = 3.0  # backoff after a failed fetch
    drop_pending: bool = False  # skip backlog on startup


class ProviderConfig(BaseModel):
    """类说明：ProviderConfig。"""
    api_key: str = ""
    api_base: str | None = None
    model: str = "gemini/gemini-2.0-flash"
    max_tokens: int = 4096
    temperature: float = 0.8
    timeout: float = 60.0  # seconds before a generation is reported as timed out


class DeliveryConfig(BaseModel):
    """类说明：DeliveryConfig。"""
    max_message_bytes: int = 4000  # hard per-message limit, UTF-8 bytes
    preview_chars: int = 600  # longer replies are previewed


class HistoryConfig(BaseModel):
    """类说明：HistoryConfig。"""
    path: str = "~/.xhsbot/history.jsonl"
    cap: int = 10000
    display_limit: int = 5  # records shown by /search and /history


class Config(BaseSettings):
    """类说明：Config。"""
    model_config = SettingsConfigDict(env_prefix="XHSBOT_", env_nested_delimiter="__")

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    @property
    def history_path(self) -> Path:
        """函数说明：history_path。"""
        return Path(self.history.path).expanduser()
