"""模块说明：loader。"""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from xhsbot.config.schema import Config

# 兼容旧脚本沿用的环境变量名
LEGACY_ENV_KEYS = {
    "telegram": ("token", "TELEGRAM_BOT_TOKEN"),
    "provider": ("api_key", "GEMINI_API_KEY"),
}


def get_config_path() -> Path:
    """函数说明：get_config_path。"""
    return Path.home() / ".xhsbot" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """读取配置文件；文件缺失或损坏时使用默认值，环境变量始终生效。"""
    path = config_path or get_config_path()
    config = None

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            config = Config.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}. Using default configuration.")

    config = config or Config()
    _apply_legacy_env(config)
    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """函数说明：save_config。"""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _apply_legacy_env(config: Config) -> None:
    """函数说明：_apply_legacy_env。"""
    for section_name, (field_name, env_key) in LEGACY_ENV_KEYS.items():
        section = getattr(config, section_name)
        value = os.environ.get(env_key)
        if value and not getattr(section, field_name):
            setattr(section, field_name, value)


def convert_keys(data: Any) -> Any:
    """函数说明：convert_keys。"""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """函数说明：convert_to_camel。"""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """函数说明：camel_to_snake。"""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """函数说明：snake_to_camel。"""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
