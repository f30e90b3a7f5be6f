from config import CF_API_URL, Settings


def test_defaults(monkeypatch):
    for name in ("CF_API_URL", "CF_MIN_REQUEST_INTERVAL", "CF_TIMEZONE", "CF_LOG_VISITS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.api_url == CF_API_URL
    assert settings.min_request_interval == 2.0
    assert settings.timezone == "UTC"
    assert settings.log_visits


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CF_API_URL", "http://mirror.local/api/")
    monkeypatch.setenv("CF_MIN_REQUEST_INTERVAL", "0.5")
    monkeypatch.setenv("CF_TIMEZONE", "Asia/Karachi")
    monkeypatch.setenv("CF_LOG_VISITS", "no")
    monkeypatch.setenv("CF_LOGLEVEL", "debug")
    settings = Settings.from_env()
    assert settings.api_url == "http://mirror.local/api"
    assert settings.min_request_interval == 0.5
    assert settings.timezone == "Asia/Karachi"
    assert not settings.log_visits
    assert settings.log_level == "DEBUG"
