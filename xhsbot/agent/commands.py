"""命令表模块。

所有命令在一张静态表中定义：名称、是否需要参数、处理类型、
以及按语言构建提示词的函数。运行期间不修改。
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Literal

CommandKind = Literal["generate", "batch", "search", "history", "menu", "help", "export", "coverimage"]
PromptBuilder = Callable[[str, str], str]

# 「/命令」或「/命令@机器人名」，其后可跟一个空白和任意参数
COMMAND_PATTERN = re.compile(r"^(/[A-Za-z][\w-]*)(?:@\w+)?(?:\s+([\s\S]*))?$")

# /batch 支持半角逗号、全角逗号和换行
BATCH_SPLIT_PATTERN = re.compile(r"[,，\n]")

FULL_TEXT_TRIGGERS = frozenset({"全文", "查看全文", "fulltext", "full text", "full", "/fulltext"})
FULL_TEXT_CALLBACK = "fulltext"

# 常见拼写错误 -> 正确命令
TYPO_TABLE: dict[str, str] = {
    "/hool": "/hook",
    "/hok": "/hook",
    "/titel": "/title",
    "/tittle": "/title",
    "/titl": "/title",
    "/tag": "/tags",
    "/psot": "/post",
    "/pots": "/post",
    "/cvoer": "/cover",
    "/covr": "/cover",
    "/covertxt": "/covertext",
    "/bacth": "/batch",
    "/btach": "/batch",
    "/abtset": "/abtest",
    "/replay": "/reply",
    "/serach": "/search",
    "/seach": "/search",
    "/histroy": "/history",
    "/hisotry": "/history",
    "/meun": "/menu",
    "/help": "/xhs-help",
    "/xhshelp": "/xhs-help",
    "/exprot": "/export",
    "/coverimg": "/coverimage",
    "/coverimgae": "/coverimage",
    "/cover-image": "/coverimage",
}


def _template(zh: str, en: str) -> PromptBuilder:
    """函数说明：_template。"""
    def build(topic: str, language: str) -> str:
        return (en if language == "en" else zh).format(topic=topic)
    return build


TITLE_PROMPT = _template(
    "你是一位小红书爆款标题专家。请围绕主题「{topic}」生成10个吸睛的小红书标题，"
    "每个标题不超过20个字，适当使用emoji和数字，每行一个，不要有多余解释。",
    "You are an expert at viral Xiaohongshu titles. Write 10 eye-catching titles about "
    "\"{topic}\", each under 20 words, using emoji and numbers where natural. "
    "One per line, no extra explanation.",
)

POST_PROMPT = _template(
    "你是一位小红书图文博主。请围绕主题「{topic}」写一篇完整的小红书图文笔记，"
    "包含标题、分段正文（口语化、有真实感、适当使用emoji）和结尾互动引导。",
    "You are a Xiaohongshu lifestyle blogger. Write a complete post about \"{topic}\": "
    "a title, a conversational body in short paragraphs with emoji, and a closing call "
    "for comments.",
)

TAGS_PROMPT = _template(
    "请为主题「{topic}」推荐15个小红书热门标签，兼顾大流量标签和精准长尾标签，"
    "格式为 #标签，用空格分隔，不要有多余解释。",
    "Suggest 15 trending Xiaohongshu hashtags for \"{topic}\", mixing broad high-traffic "
    "tags and precise long-tail tags. Format as #tag separated by spaces, no explanation.",
)

COVER_PROMPT = _template(
    "请为主题「{topic}」生成5条小红书封面文案，每条不超过12个字，"
    "要有冲击力、适合叠加在封面图上，每行一条。",
    "Write 5 Xiaohongshu cover captions for \"{topic}\", each at most 8 words, punchy "
    "enough to overlay on a cover image. One per line.",
)

COVER_TEXT_PROMPT = _template(
    "请为主题「{topic}」生成5组小红书叠字标题（如「绝绝子」「冲冲冲」式的叠字表达），"
    "每组包含主标题和副标题，每组一行。",
    "Create 5 Xiaohongshu stacked-word cover headlines for \"{topic}\" using playful "
    "repetition (like \"so so good\"). Each line has a main headline and a subtitle.",
)

ABTEST_PROMPT = _template(
    "你是一位小红书爆款内容专家。请围绕主题「{topic}」，分别用三种不同风格各生成一组完整的小红书内容"
    "（每组包含：标题、正文、标签），风格要求如下：\n\n"
    "A. 真实生活流：内容自然真实，像朋友间的真实分享。\n"
    "B. 猎奇冲突流：内容有反转、冲突感，能激发好奇心。\n"
    "C. 情绪感染流：内容有强烈代入感和情绪渲染。\n\n"
    "每组内容请严格按照如下格式输出：\n"
    "【风格A】\n标题：...\n正文：...\n标签：#... #... #...\n"
    "【风格B】\n标题：...\n正文：...\n标签：#... #... #...\n"
    "【风格C】\n标题：...\n正文：...\n标签：#... #... #...\n\n"
    "三组内容之间用\"===\"分隔，不要有任何多余解释。",
    "You are a Xiaohongshu viral content expert. For the topic \"{topic}\", write three "
    "complete posts (title, body, hashtags) in three styles:\n\n"
    "A. Real life: natural, like a friend sharing.\n"
    "B. Curiosity and conflict: a twist that sparks curiosity.\n"
    "C. Emotional: strong empathy and mood.\n\n"
    "Use exactly this format:\n"
    "[Style A]\nTitle: ...\nBody: ...\nTags: #... #... #...\n"
    "[Style B]\nTitle: ...\nBody: ...\nTags: #... #... #...\n"
    "[Style C]\nTitle: ...\nBody: ...\nTags: #... #... #...\n\n"
    "Separate the three with \"===\" and add no other explanation.",
)

REPLY_PROMPT = _template(
    "你是一位亲切专业的小红书博主。粉丝评论：「{topic}」。请写3条不同语气的回复"
    "（热情、幽默、专业），每条不超过50字，每条独立成行。",
    "You are a friendly, professional Xiaohongshu creator. A follower commented: "
    "\"{topic}\". Write 3 replies in different tones (warm, funny, expert), each under "
    "40 words, one per line.",
)

HOOK_PROMPT = _template(
    "你是一位小红书高互动博主。请为主题「{topic}」生成3条自然真实、有互动引导性的评论语句，"
    "适合放在笔记结尾引导用户留言。直接输出3条评论，每条独立成行，不要有多余解释。",
    "You are a highly engaging Xiaohongshu creator. For the topic \"{topic}\", write 3 "
    "natural closing lines that invite readers to comment. Output just the 3 lines, "
    "one per line, no explanation.",
)


@dataclass(frozen=True)
class CommandSpec:
    """类说明：CommandSpec。"""

    name: str
    kind: CommandKind
    argument_required: bool
    description: dict[str, str] = field(default_factory=dict)
    prompt_builder: PromptBuilder | None = None
    example: str = ""

    def build_prompt(self, topic: str, language: str) -> str:
        """函数说明：build_prompt。"""
        if self.prompt_builder is None:
            raise ValueError(f"Command {self.name} does not generate text")
        return self.prompt_builder(topic, language)

    def usage(self) -> str:
        """函数说明：usage。"""
        return f"{self.name} {self.example}".strip()


@dataclass(frozen=True)
class ParsedCommand:
    """类说明：ParsedCommand。"""
    name: str
    argument: str


def parse_command(text: str) -> ParsedCommand | None:
    """拆出命令名（小写）和参数（去掉首尾空白）；不是命令时返回 None。"""
    match = COMMAND_PATTERN.match(text.strip())
    if not match:
        return None
    return ParsedCommand(name=match.group(1).lower(), argument=(match.group(2) or "").strip())


def split_batch_topics(argument: str) -> list[str]:
    """函数说明：split_batch_topics。"""
    return [part.strip() for part in BATCH_SPLIT_PATTERN.split(argument) if part.strip()]


def is_full_text_trigger(text: str) -> bool:
    """函数说明：is_full_text_trigger。"""
    return text.strip().lower() in FULL_TEXT_TRIGGERS


class CommandRegistry:
    """命令容器，按名称查找。"""

    def __init__(self, specs: list[CommandSpec] | None = None, aliases: dict[str, str] | None = None):
        self._commands: dict[str, CommandSpec] = {}
        self._aliases: dict[str, str] = dict(aliases or {})
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: CommandSpec) -> None:
        """注册命令；同名命令会被后注册者覆盖。"""
        self._commands[spec.name] = spec

    def get(self, name: str) -> CommandSpec | None:
        """函数说明：get。"""
        name = self._aliases.get(name, name)
        return self._commands.get(name)

    def suggest(self, name: str) -> str | None:
        """查拼写纠错表，只返回已注册的命令。"""
        suggestion = TYPO_TABLE.get(name)
        if suggestion and suggestion in self._commands:
            return suggestion
        return None

    def specs(self) -> list[CommandSpec]:
        """函数说明：specs。"""
        return list(self._commands.values())

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._commands)


def _spec(name: str, kind: CommandKind, zh: str, en: str, prompt: PromptBuilder | None = None,
          argument_required: bool = True, example: str = "") -> CommandSpec:
    return CommandSpec(
        name=name,
        kind=kind,
        argument_required=argument_required,
        description={"zh": zh, "en": en},
        prompt_builder=prompt,
        example=example,
    )


DEFAULT_COMMANDS: list[CommandSpec] = [
    _spec("/title", "generate", "爆款标题", "Viral titles", TITLE_PROMPT, example="奶茶店开业"),
    _spec("/post", "generate", "图文笔记", "Full post", POST_PROMPT, example="奶茶店开业"),
    _spec("/tags", "generate", "热门标签", "Trending hashtags", TAGS_PROMPT, example="奶茶店开业"),
    _spec("/cover", "generate", "封面文案", "Cover captions", COVER_PROMPT, example="奶茶店开业"),
    _spec("/covertext", "generate", "叠字标题", "Stacked-word headlines", COVER_TEXT_PROMPT, example="奶茶店开业"),
    _spec("/batch", "batch", "批量标题", "Batch titles", TITLE_PROMPT, example="奶茶,咖啡"),
    _spec("/abtest", "generate", "AB测试三种风格", "A/B test in three styles", ABTEST_PROMPT, example="护肤品"),
    _spec("/reply", "generate", "评论回复助手", "Comment replies", REPLY_PROMPT, example="这家店在哪里？"),
    _spec("/hook", "generate", "评论引导语", "Comment hooks", HOOK_PROMPT, example="奶茶店开业"),
    _spec("/search", "search", "搜索历史", "Search history", example="奶茶"),
    _spec("/history", "history", "最近记录", "Recent history", argument_required=False),
    _spec("/export", "export", "整合笔记", "Bundle a note", example="奶茶店开业"),
    _spec("/coverimage", "coverimage", "封面图建议", "Cover image idea", example="奶茶店开业"),
    _spec("/menu", "menu", "命令菜单", "Command menu", argument_required=False),
    _spec("/xhs-help", "help", "使用说明", "Help", argument_required=False),
]

DEFAULT_ALIASES = {"/start": "/menu"}


def build_default_registry() -> CommandRegistry:
    """函数说明：build_default_registry。"""
    return CommandRegistry(DEFAULT_COMMANDS, DEFAULT_ALIASES)
