from shared.config import DEFAULT_GATEWAY_SCRIPT_URL, Settings, load_settings


class TestSettings:
    def test_api_base_appends_version_prefix(self):
        assert Settings(backend_base_url="https://api.vauria.in/").api_base == "https://api.vauria.in/api/v1"

    def test_defaults(self):
        settings = Settings()
        assert settings.currency == "INR"
        assert settings.free_shipping_threshold == 599.0
        assert settings.online_discount_rate == 0.05
        assert settings.item_weight == 0.5
        assert settings.request_timeout is None
        assert settings.gateway_script_url == DEFAULT_GATEWAY_SCRIPT_URL
        assert settings.session_idle_ttl == 1800.0
        assert settings.max_sessions == 1000


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("VAURIA_BACKEND_BASE_URL", "https://backend.example")
        monkeypatch.setenv("ENVIRONMENT", "Production")
        monkeypatch.setenv("VAURIA_FREE_SHIPPING_THRESHOLD", "999")
        monkeypatch.setenv("VAURIA_REQUEST_TIMEOUT", "15")
        monkeypatch.setenv("VAURIA_SESSION_IDLE_TTL", "60")
        monkeypatch.setenv("VAURIA_MAX_SESSIONS", "50")

        settings = load_settings()

        assert settings.backend_base_url == "https://backend.example"
        assert settings.is_production
        assert settings.free_shipping_threshold == 999.0
        assert settings.request_timeout == 15.0
        assert settings.session_idle_ttl == 60.0
        assert settings.max_sessions == 50

    def test_blank_numbers_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("VAURIA_ONLINE_DISCOUNT_RATE", " ")
        monkeypatch.delenv("VAURIA_REQUEST_TIMEOUT", raising=False)
        monkeypatch.setenv("VAURIA_MAX_SESSIONS", "")

        settings = load_settings()

        assert settings.online_discount_rate == 0.05
        assert settings.request_timeout is None
        assert settings.max_sessions == 1000
