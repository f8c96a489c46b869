from xhsbot.agent.commands import (
    TYPO_TABLE,
    build_default_registry,
    is_full_text_trigger,
    parse_command,
    split_batch_topics,
)


def test_parse_command_splits_name_and_argument():
    parsed = parse_command("/TITLE   奶茶店 开业 ")
    assert (parsed.name, parsed.argument) == ("/title", "奶茶店 开业")
    assert parse_command("/xhs-help").argument == ""
    assert parse_command("/title@xhs_bot 咖啡").name == "/title"
    assert parse_command("奶茶") is None
    assert parse_command("/") is None


def test_split_batch_topics_handles_both_comma_widths():
    assert split_batch_topics("奶茶,,咖啡 店") == ["奶茶", "咖啡 店"]
    assert split_batch_topics(" a ，b\nc , ") == ["a", "b", "c"]
    assert split_batch_topics(",，") == []


def test_full_text_trigger_is_case_insensitive():
    for text in ["全文", "查看全文", "FULLTEXT", "Full Text", " fulltext "]:
        assert is_full_text_trigger(text)
    assert not is_full_text_trigger("全文呢")


def test_registry_covers_command_surface():
    registry = build_default_registry()
    for name in ["/title", "/post", "/tags", "/cover", "/covertext", "/batch", "/abtest",
                 "/reply", "/hook", "/search", "/history", "/menu", "/xhs-help", "/export"]:
        assert name in registry
    assert registry.get("/start").name == "/menu"
    assert not registry.get("/history").argument_required
    assert registry.get("/title").argument_required


def test_typo_table_only_points_at_real_commands():
    registry = build_default_registry()
    assert registry.suggest("/hool") == "/hook"
    assert registry.suggest("/nonsense") is None
    assert all(target in registry for target in TYPO_TABLE.values())


def test_prompts_are_localized():
    spec = build_default_registry().get("/abtest")
    assert "「护肤品」" in spec.build_prompt("护肤品", "zh")
    assert "\"skin care\"" in spec.build_prompt("skin care", "en")
