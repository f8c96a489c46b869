import pytest

from xhsbot.agent.messages import BATCH_DIVIDER, t
from xhsbot.errors import ConfigurationError, GenerationFailure, GenerationTimeout
from tests.conftest import make_event


def _greet(router, chat_id="100", language="zh"):
    session = router.sessions.get_or_create(chat_id)
    session.greeted = True
    session.language = language
    return session


@pytest.mark.asyncio
async def test_first_event_sends_welcome_and_still_runs_command(router, channel, provider):
    await router.dispatch(make_event(1, "/title 奶茶店开业"))

    assert channel.texts[0].startswith(t("welcome", "zh"))
    assert channel.texts[1] == "生成结果"
    assert router.sessions.get("100").greeted
    assert len(provider.prompts) == 1

    await router.dispatch(make_event(2, "/title 咖啡"))
    assert sum(text.startswith(t("welcome", "zh")) for text in channel.texts) == 1


@pytest.mark.asyncio
async def test_bare_title_requires_argument(router, channel, provider, history):
    _greet(router)

    await router.dispatch(make_event(1, "/title"))
    await router.dispatch(make_event(2, "/title   "))

    expected = t("argument_required", "zh", usage="/title 奶茶店开业")
    assert channel.texts == [expected, expected]
    assert provider.prompts == []
    assert len(history) == 0


@pytest.mark.asyncio
async def test_argument_required_message_is_localized(router, channel):
    _greet(router, language="en")

    await router.dispatch(make_event(1, "/post"))

    assert channel.texts == [t("argument_required", "en", usage="/post 奶茶店开业")]


@pytest.mark.asyncio
async def test_successful_generation_is_recorded_and_delivered(router, channel, provider, history):
    _greet(router)

    await router.dispatch(make_event(1, "/hook 奶茶店开业"))

    assert "奶茶店开业" in provider.prompts[0]
    assert channel.texts == ["生成结果"]
    record = history.records()[0]
    assert (record.conversation_id, record.command_type, record.topic, record.result) == (
        "100", "/hook", "奶茶店开业", "生成结果"
    )


@pytest.mark.asyncio
async def test_language_hint_selects_prompt_language(router, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/title coffee", language_hint="en-US"))

    assert router.sessions.get("100").language == "en"
    assert "Write 10 eye-catching titles" in provider.prompts[0]


@pytest.mark.asyncio
async def test_batch_splits_topics_and_combines_reply(router, channel, provider, history):
    _greet(router)
    provider.reply = lambda prompt: "标题 for " + prompt[-10:]

    await router.dispatch(make_event(1, "/batch 奶茶,,咖啡 店"))

    assert len(provider.prompts) == 2
    assert "「奶茶」" in provider.prompts[0]
    assert "「咖啡 店」" in provider.prompts[1]
    assert [r.topic for r in history.records()] == ["奶茶", "咖啡 店"]
    assert len(channel.sent) == 1
    reply = channel.texts[0]
    assert "【奶茶】" in reply and "【咖啡 店】" in reply
    assert BATCH_DIVIDER in reply


@pytest.mark.asyncio
async def test_batch_with_only_delimiters_requires_argument(router, channel, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/batch ，, ,"))

    assert channel.texts == [t("argument_required", "zh", usage="/batch 奶茶,咖啡")]
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_batch_keeps_going_when_one_topic_fails(router, channel, provider, history):
    _greet(router)
    provider.errors["「坏」"] = GenerationFailure("boom")

    await router.dispatch(make_event(1, "/batch 好，坏，行"))

    assert [r.topic for r in history.records()] == ["好", "行"]
    assert t("batch_item_failed", "zh", reason=t("generation_failed", "zh")) in channel.texts[0]


@pytest.mark.asyncio
async def test_typo_suggests_command_without_generating(router, channel, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/hool test"))

    assert channel.texts == [t("did_you_mean", "zh", suggestion="/hook")]
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_unknown_command_and_plain_text_are_ignored(router, channel, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/whatever 123"))
    await router.dispatch(make_event(2, "hello there"))

    assert channel.sent == []
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_generation_errors_map_to_localized_messages(router, channel, provider, history):
    _greet(router)
    provider.errors["超时"] = GenerationTimeout("deadline")
    provider.errors["失败"] = GenerationFailure("500 internal")
    provider.errors["配置"] = ConfigurationError("no key")

    await router.dispatch(make_event(1, "/title 超时"))
    await router.dispatch(make_event(2, "/title 失败"))
    await router.dispatch(make_event(3, "/title 配置"))

    assert channel.texts == [
        t("generation_timeout", "zh"),
        t("generation_failed", "zh"),
        t("not_configured", "zh"),
    ]
    assert len(history) == 0


@pytest.mark.asyncio
async def test_full_text_trigger_takes_priority(router, channel, provider):
    session = _greet(router)
    long_text = "长" * 700
    provider.reply = long_text

    await router.dispatch(make_event(1, "/post 奶茶"))
    assert session.pending_full_text is not None

    await router.dispatch(make_event(2, "FullText"))

    assert channel.texts[-1] == long_text
    assert session.pending_full_text is None
    assert len(provider.prompts) == 1


@pytest.mark.asyncio
async def test_full_text_button_press_is_acknowledged(router, channel, provider):
    session = _greet(router)
    provider.reply = "x" * 700
    await router.dispatch(make_event(1, "/post 奶茶"))

    await router.dispatch(make_event(2, None, callback_data="fulltext", callback_id="cb-1"))

    assert channel.answered == ["cb-1"]
    assert channel.texts[-1] == "x" * 700
    assert session.pending_full_text is None


@pytest.mark.asyncio
async def test_full_text_trigger_without_pending_text(router, channel):
    _greet(router)

    await router.dispatch(make_event(1, "全文"))

    assert channel.texts == [t("no_pending", "zh")]


@pytest.mark.asyncio
async def test_search_and_history_show_most_recent_first(router, channel, provider):
    _greet(router)
    for topic in ["奶茶一", "咖啡", "奶茶二"]:
        await router.dispatch(make_event(len(channel.sent) + 1, f"/title {topic}"))
    channel.sent.clear()

    await router.dispatch(make_event(10, "/search 奶茶"))
    reply = channel.texts[0]
    assert reply.startswith(t("search_header", "zh", keyword="奶茶"))
    assert reply.index("奶茶二") < reply.index("奶茶一")
    assert "咖啡" not in reply

    await router.dispatch(make_event(11, "/history"))
    assert channel.texts[1].index("奶茶二") < channel.texts[1].index("咖啡")


@pytest.mark.asyncio
async def test_search_without_keyword_or_results(router, channel):
    _greet(router)

    await router.dispatch(make_event(1, "/search"))
    await router.dispatch(make_event(2, "/search 不存在"))

    assert channel.texts == [t("empty_keyword", "zh"), t("no_records", "zh")]


@pytest.mark.asyncio
async def test_reply_without_content(router, channel):
    _greet(router)

    await router.dispatch(make_event(1, "/reply"))

    assert channel.texts == [t("empty_content", "zh")]


@pytest.mark.asyncio
async def test_export_combines_latest_results_for_topic(router, channel, provider):
    _greet(router)
    provider.reply = lambda prompt: "OUT:" + prompt[:6]
    await router.dispatch(make_event(1, "/title 奶茶"))
    await router.dispatch(make_event(2, "/tags 奶茶"))
    channel.sent.clear()

    await router.dispatch(make_event(3, "/export 奶茶"))

    reply = channel.texts[0]
    assert reply.startswith(t("export_header", "zh", topic="奶茶"))
    assert "爆款标题" in reply and "热门标签" in reply
    assert "图文内容" not in reply

    await router.dispatch(make_event(4, "/export 蛋糕"))
    assert channel.texts[1] == t("nothing_to_export", "zh", topic="蛋糕")


@pytest.mark.asyncio
async def test_menu_help_and_start_alias(router, channel, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/menu"))
    await router.dispatch(make_event(2, "/start"))
    await router.dispatch(make_event(3, "/xhs-help"))
    await router.dispatch(make_event(4, "/title@xhs_bot 奶茶"))

    assert channel.texts[0].startswith(t("menu_header", "zh"))
    assert "/batch" in channel.texts[0]
    assert channel.texts[1] == channel.texts[0]
    assert channel.texts[2] == t("help", "zh")
    assert channel.texts[3] == "生成结果"
    assert provider.prompts and "「奶茶」" in provider.prompts[0]


@pytest.mark.asyncio
async def test_full_text_trigger_as_first_event_still_greets(router, channel, provider):
    await router.dispatch(make_event(1, "全文"))

    assert router.sessions.get("100").greeted
    assert channel.texts[0].startswith(t("welcome", "zh"))
    assert channel.texts[1] == t("no_pending", "zh")
    assert provider.prompts == []

    await router.dispatch(make_event(2, "full"))
    assert channel.texts[2:] == [t("no_pending", "zh")]


@pytest.mark.asyncio
async def test_cover_image_uses_first_line_of_latest_cover(router, channel, provider, history):
    _greet(router)
    provider.reply = "\n  开业啦！第一杯免费  \n第二条文案"
    await router.dispatch(make_event(1, "/cover 奶茶店"))
    channel.sent.clear()

    await router.dispatch(make_event(2, "/coverimage 奶茶店"))

    assert channel.texts == [
        t("cover_image_suggestion", "zh", topic="奶茶店", caption="开业啦！第一杯免费")
    ]
    assert len(provider.prompts) == 1
    assert len(history) == 1


@pytest.mark.asyncio
async def test_cover_image_without_cover_asks_for_cover_first(router, channel, provider):
    _greet(router)

    await router.dispatch(make_event(1, "/coverimage 咖啡"))
    await router.dispatch(make_event(2, "/coverimg 咖啡"))

    assert channel.texts == [
        t("cover_image_missing", "zh", topic="咖啡"),
        t("did_you_mean", "zh", suggestion="/coverimage"),
    ]
    assert provider.prompts == []
