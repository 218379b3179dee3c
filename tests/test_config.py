"""Tests for settings loading."""

from courier.config import CourierSettings, build_trigger_pattern, load_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("COURIER_TELEGRAM_BOT_TOKEN", raising=False)
        monkeypatch.delenv("COURIER_TELEGRAM_BOT_POOL", raising=False)
        settings = CourierSettings(_env_file=None)
        assert settings.telegram_bot_token is None
        assert settings.assistant_name == "Andy"
        assert settings.pool_settle_delay == 2.0
        assert settings.pool_tokens == []

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("COURIER_TELEGRAM_BOT_TOKEN", "123:ABC")
        monkeypatch.setenv("COURIER_ASSISTANT_NAME", "Jarvis")
        settings = CourierSettings(_env_file=None)
        assert settings.telegram_bot_token == "123:ABC"
        assert settings.trigger_pattern.search("@jarvis do it")

    def test_pool_tokens_split(self, monkeypatch):
        monkeypatch.setenv("COURIER_TELEGRAM_BOT_POOL", " 1:a, 2:b,, 3:c ")
        settings = CourierSettings(_env_file=None)
        assert settings.pool_tokens == ["1:a", "2:b", "3:c"]

    def test_load_settings_warns_without_token(self, monkeypatch, caplog, tmp_path):
        monkeypatch.delenv("COURIER_TELEGRAM_BOT_TOKEN", raising=False)
        monkeypatch.chdir(tmp_path)
        load_settings()
        assert "No Telegram bot token configured" in caplog.text


class TestTriggerPattern:
    def test_anchored_at_start(self):
        pattern = build_trigger_pattern("Andy")
        assert pattern.search("@Andy hello")
        assert pattern.search("@ANDY")
        assert not pattern.search("hello @Andy")

    def test_word_boundary(self):
        assert not build_trigger_pattern("Andy").search("@Andyman hi")

    def test_name_is_escaped(self):
        pattern = build_trigger_pattern("A.I")
        assert pattern.search("@A.I go")
        assert not pattern.search("@AXI go")
