"""错误分类。

处理器只负责抛出，CommandRouter 在分发边界统一转换为本地化提示；
只有拉取阶段的 TransportError 会被 IngestionLoop 捕获并退避重试。
"""


class XhsbotError(Exception):
    """类说明：XhsbotError。"""


class ConfigurationError(XhsbotError):
    """缺少必需的凭据，仅影响对应能力，不影响进程。"""


class TransportError(XhsbotError):
    """拉取或发送时的网络/超时错误。"""


class GenerationError(XhsbotError):
    """类说明：GenerationError。"""


class GenerationTimeout(GenerationError):
    """生成调用超过时限。"""


class GenerationFailure(GenerationError):
    """其他生成错误；细节只写日志，不展示给用户。"""


class UserInputError(XhsbotError):
    """用户输入不完整，直接提示，不发起生成。"""

    ARGUMENT_REQUIRED = "argument_required"
    EMPTY_KEYWORD = "empty_keyword"
    EMPTY_CONTENT = "empty_content"

    def __init__(self, kind: str, command: str = ""):
        super().__init__(f"{kind}: {command}" if command else kind)
        self.kind = kind
        self.command = command
