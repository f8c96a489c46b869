"""模块说明：helpers。"""

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger


def ensure_dir(path: Path) -> Path:
    """函数说明：ensure_dir。"""
    path.mkdir(parents=True, exist_ok=True)
    return path


def timestamp() -> str:
    """函数说明：timestamp。"""
    return datetime.now().isoformat()


def truncate_string(s: str, max_len: int = 100, suffix: str = "...") -> str:
    """函数说明：truncate_string。"""
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix


def utf8_len(s: str) -> int:
    """函数说明：utf8_len。"""
    return len(s.encode("utf-8"))


def split_utf8(text: str, limit: int, first_limit: int | None = None) -> list[str]:
    """按 UTF-8 字节数切分文本，切点始终落在字符边界上。

    first_limit 用于首段与后续段上限不同的情况（后续段要留出页码前缀）。
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    data = text.encode("utf-8")
    chunks: list[str] = []
    start = 0
    budget = first_limit if first_limit is not None else limit

    while start < len(data):
        end = min(start + budget, len(data))
        # 回退到字符起始字节，避免切开多字节字符
        while end < len(data) and (data[end] & 0xC0) == 0x80:
            end -= 1
        if end <= start:
            raise ValueError(f"limit {budget} is smaller than a single character")
        chunks.append(data[start:end].decode("utf-8"))
        start = end
        budget = limit

    return chunks


def setup_logging(level: str = "INFO") -> None:
    """函数说明：setup_logging。"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}",
    )
