"""面向用户的本地化文案。"""

from xhsbot.session.manager import DEFAULT_LANGUAGE

MESSAGES: dict[str, dict[str, str]] = {
    "welcome": {
        "zh": "👋 你好！我是小红书文案助手，发送命令即可生成爆款内容。",
        "en": "👋 Hi! I'm your Xiaohongshu copywriting assistant. Send a command to get started.",
    },
    "argument_required": {
        "zh": "❌ 请在命令后输入主题，例如：{usage}",
        "en": "❌ Please add a topic after the command, e.g. {usage}",
    },
    "empty_keyword": {
        "zh": "❌ 请输入要搜索的关键词，例如：/search 奶茶",
        "en": "❌ Please give a keyword to search for, e.g. /search coffee",
    },
    "empty_content": {
        "zh": "❌ 请输入需要回复的评论内容，例如：/reply 这家店在哪里？",
        "en": "❌ Please paste the comment you want to reply to, e.g. /reply Where is this shop?",
    },
    "did_you_mean": {
        "zh": "🤔 没有这个命令，你是想用 {suggestion} 吗？",
        "en": "🤔 Unknown command. Did you mean {suggestion}?",
    },
    "generation_failed": {
        "zh": "❌ 生成失败，请稍后再试。",
        "en": "❌ Generation failed, please try again later.",
    },
    "generation_timeout": {
        "zh": "⌛ 请求超时，请检查网络或换个主题再试。",
        "en": "⌛ The request timed out. Please try again or use a different topic.",
    },
    "not_configured": {
        "zh": "⚙️ 生成服务尚未配置，请联系管理员。",
        "en": "⚙️ The generation service is not configured. Please contact the operator.",
    },
    "preview_tip": {
        "zh": "\n\n……（内容较长，回复「全文」查看完整内容）",
        "en": "\n\n... (reply FULLTEXT to see the rest)",
    },
    "full_text_button": {
        "zh": "📖 查看全文",
        "en": "📖 Full text",
    },
    "no_pending": {
        "zh": "没有待展开的内容。",
        "en": "There is nothing to expand right now.",
    },
    "no_records": {
        "zh": "🔍 没有找到相关记录。",
        "en": "🔍 No matching records.",
    },
    "search_header": {
        "zh": "🔍 「{keyword}」的最近记录：",
        "en": "🔍 Recent records for \"{keyword}\":",
    },
    "history_header": {
        "zh": "🕘 最近的生成记录：",
        "en": "🕘 Your recent generations:",
    },
    "batch_header": {
        "zh": "✅ 批量生成完成，共 {count} 个主题：",
        "en": "✅ Batch finished, {count} topics:",
    },
    "batch_item_failed": {
        "zh": "（该主题生成失败：{reason}）",
        "en": "(generation failed for this topic: {reason})",
    },
    "export_header": {
        "zh": "小红书笔记整合 - {topic}",
        "en": "Xiaohongshu note bundle - {topic}",
    },
    "nothing_to_export": {
        "zh": "❌ 没有找到与「{topic}」相关的内容，请先用 /title、/cover、/post、/tags 生成。",
        "en": "❌ Nothing recorded for \"{topic}\" yet. Generate with /title, /cover, /post or /tags first.",
    },
    "cover_image_suggestion": {
        "zh": "🖼️ 封面图建议：建议使用{topic}相关的实景照片（如门店外观、产品陈列、活动现场等），"
              "叠加封面文案「{caption}」，整体风格要吸睛、有氛围感。",
        "en": "🖼️ Cover image idea: use a real photo related to {topic} (storefront, product display "
              "or the event itself), overlay the caption \"{caption}\", and keep the look eye-catching "
              "with a strong mood.",
    },
    "cover_image_missing": {
        "zh": "❌ 还没有「{topic}」的封面文案，请先用 /cover {topic} 生成。",
        "en": "❌ No cover caption for \"{topic}\" yet. Run /cover {topic} first.",
    },
    "menu_header": {
        "zh": "🧃 小红书助手命令菜单",
        "en": "🧃 Xiaohongshu assistant commands",
    },
    "help": {
        "zh": (
            "📘 使用说明\n"
            "· 命令后面空一格写主题，例如：/title 奶茶店开业\n"
            "· /batch 支持用逗号分隔多个主题：/batch 奶茶,咖啡\n"
            "· 回复过长时只显示前一部分，回复「全文」查看完整内容\n"
            "· /search 关键词 查找历史，/history 查看最近记录"
        ),
        "en": (
            "📘 How to use\n"
            "· Put the topic after the command: /title bubble tea shop opening\n"
            "· /batch takes comma-separated topics: /batch tea,coffee\n"
            "· Long replies are previewed; reply FULLTEXT to see everything\n"
            "· /search keyword finds past results, /history shows recent ones"
        ),
    },
}

# 批量结果之间的分隔线
BATCH_DIVIDER = "\n\n━━━━━━━━━━\n\n"


def t(key: str, language: str, **kwargs: object) -> str:
    """取对应语言的文案并填充参数。"""
    entry = MESSAGES[key]
    text = entry.get(language) or entry[DEFAULT_LANGUAGE]
    return text.format(**kwargs) if kwargs else text
