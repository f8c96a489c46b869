"""生成历史存储模块。

内存中保留最近 cap 条记录（超出后从最旧的开始丢弃），
磁盘上是一份只追加的 JSONL 日志，每次追加都立即落盘。
末行残缺（追加中断）时只丢弃该行；其他损坏或不可读时按空日志处理并记录错误，
绝不让分发器崩溃。
"""

import json
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from xhsbot.utils.helpers import ensure_dir, timestamp

DEFAULT_CAP = 10000


@dataclass(frozen=True)
class HistoryRecord:
    """类说明：HistoryRecord。"""

    conversation_id: str
    command_type: str
    topic: str
    result: str
    time: str = field(default_factory=timestamp)

    def to_dict(self) -> dict[str, Any]:
        """函数说明：to_dict。"""
        return {
            "time": self.time,
            "conversationId": self.conversation_id,
            "commandType": self.command_type,
            "topic": self.topic,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryRecord":
        """函数说明：from_dict。"""
        return cls(
            time=str(data["time"]),
            conversation_id=str(data["conversationId"]),
            command_type=str(data["commandType"]),
            topic=str(data["topic"]),
            result=str(data["result"]),
        )


class HistoryStore:
    """只追加的生成记录日志。

    path 为 None 时只在内存中工作（测试与 CLI 预览使用）。
    """

    def __init__(self, path: Path | None = None, cap: int = DEFAULT_CAP):
        if cap <= 0:
            raise ValueError("cap must be positive")
        self.path = path
        self.cap = cap
        self._records: deque[HistoryRecord] = deque(maxlen=cap)
        self._lines_on_disk = 0
        if path is not None:
            self._load(path)

    def _load(self, path: Path) -> None:
        """读取日志；只有最后一行残缺（追加时中断）时跳过该行，其余损坏按空日志处理。"""
        if not path.exists():
            return

        try:
            with open(path, encoding="utf-8") as f:
                lines = [line.strip() for line in f if line.strip()]
        except (OSError, ValueError) as e:
            logger.error(f"History log {path} is unreadable, starting empty: {e}")
            self._quarantine(path)
            return

        records = []
        torn_tail = False
        for index, line in enumerate(lines):
            try:
                records.append(HistoryRecord.from_dict(json.loads(line)))
            except (ValueError, KeyError, TypeError) as e:
                if index == len(lines) - 1:
                    logger.warning(f"Skipping truncated last line of history log {path}: {e}")
                    torn_tail = True
                    break
                logger.error(f"History log {path} is corrupt at line {index + 1}, starting empty: {e}")
                self._quarantine(path)
                return

        self._records.extend(records)
        self._lines_on_disk = len(records)
        if torn_tail:
            # 重写文件，去掉残缺行，后续追加从干净的行尾开始
            self._compact(path)
        logger.debug(f"Loaded {len(self._records)} history records from {path}")

    def _quarantine(self, path: Path) -> None:
        """把损坏的日志挪到一旁，后续追加写入新文件。"""
        target = path.with_suffix(path.suffix + ".corrupt")
        try:
            path.replace(target)
            logger.warning(f"Moved corrupt history log to {target}")
        except OSError as e:
            logger.error(f"Could not move corrupt history log {path}: {e}")

    def append(self, record: HistoryRecord) -> None:
        """追加一条记录；超过上限时 deque 自动丢弃最旧的记录。"""
        self._records.append(record)
        if self.path is None:
            return

        try:
            ensure_dir(self.path.parent)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
                f.flush()
            self._lines_on_disk += 1
        except OSError as e:
            logger.error(f"Failed to persist history record: {e}")
            return

        if self._lines_on_disk > self.cap * 2:
            self._compact(self.path)

    def _compact(self, path: Path) -> None:
        """用内存中的尾部重写日志，防止文件无限增长。"""
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                for record in self._records:
                    f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
            tmp.replace(path)
            self._lines_on_disk = len(self._records)
            logger.info(f"Compacted history log to {self._lines_on_disk} records")
        except OSError as e:
            logger.error(f"Failed to compact history log: {e}")

    def search(self, keyword: str, conversation_id: str | None = None) -> list[HistoryRecord]:
        """按原始顺序返回匹配记录；调用方自行截取最近 N 条并倒序展示。"""
        return [
            r for r in self._records
            if (conversation_id is None or r.conversation_id == conversation_id)
            and (keyword in r.topic or keyword in r.result)
        ]

    def recent(self, conversation_id: str, limit: int) -> list[HistoryRecord]:
        """函数说明：recent。"""
        if limit <= 0:
            return []
        found: list[HistoryRecord] = []
        for record in reversed(self._records):
            if record.conversation_id == conversation_id:
                found.append(record)
                if len(found) >= limit:
                    break
        return found

    def latest(self, conversation_id: str, command_type: str, topic: str) -> HistoryRecord | None:
        """函数说明：latest。"""
        for record in reversed(self._records):
            if (
                record.conversation_id == conversation_id
                and record.command_type == command_type
                and record.topic == topic
            ):
                return record
        return None

    def records(self) -> list[HistoryRecord]:
        """函数说明：records。"""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
