"""模块说明：__init__。"""

from xhsbot.config.loader import load_config, get_config_path
from xhsbot.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
