import json

from xhsbot.config.loader import camel_to_snake, load_config, save_config, snake_to_camel
from xhsbot.config.schema import Config


def test_load_config_converts_camel_case(tmp_path, monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "telegram": {"token": "abc", "allowFrom": ["42"], "retryDelay": 1.5},
        "delivery": {"previewChars": 300},
    }), encoding="utf-8")

    config = load_config(path)

    assert config.telegram.token == "abc"
    assert config.telegram.allow_from == ["42"]
    assert config.telegram.retry_delay == 1.5
    assert config.delivery.preview_chars == 300
    assert config.delivery.max_message_bytes == 4000


def test_broken_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")

    assert load_config(path).history.cap == 10000


def test_legacy_environment_variables_fill_missing_credentials(tmp_path, monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "tg-token")
    monkeypatch.setenv("GEMINI_API_KEY", "gm-key")

    config = load_config(tmp_path / "missing.json")

    assert config.telegram.token == "tg-token"
    assert config.provider.api_key == "gm-key"


def test_save_config_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config()
    config.provider.model = "gemini/gemini-1.5-pro"

    save_config(config, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["provider"]["maxTokens"] == 4096
    assert load_config(path).provider.model == "gemini/gemini-1.5-pro"


def test_case_conversion_helpers():
    assert camel_to_snake("maxMessageBytes") == "max_message_bytes"
    assert snake_to_camel("max_message_bytes") == "maxMessageBytes"
