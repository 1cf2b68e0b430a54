from concierge.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CONCIERGE_VECTOR_DIM", "CONCIERGE_INTENT_THRESHOLD", "LOG_LEVEL", "LLM_FALLBACK"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings == Settings()
        assert settings.vector_dim == 100
        assert settings.intent_threshold == 0.3
        assert not settings.llm_fallback

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CONCIERGE_VECTOR_DIM", "256")
        monkeypatch.setenv("CONCIERGE_INTENT_THRESHOLD", "0.5")
        monkeypatch.setenv("CONCIERGE_MAX_ADULTS", "4")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LLM_FALLBACK", "true")
        settings = Settings.from_env()
        assert settings.vector_dim == 256
        assert settings.intent_threshold == 0.5
        assert settings.max_adults == 4
        assert settings.log_level == "DEBUG"
        assert settings.llm_fallback

    def test_bad_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("CONCIERGE_VECTOR_DIM", "lots")
        monkeypatch.setenv("CONCIERGE_INTENT_THRESHOLD", "high")
        settings = Settings.from_env()
        assert settings.vector_dim == 100
        assert settings.intent_threshold == 0.3
