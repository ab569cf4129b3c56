from app.settings import get_settings


def test_get_settings_is_cached():
    get_settings.cache_clear()
    s1 = get_settings()
    s2 = get_settings()
    assert s1 is s2  # lru_cache returns the same instance


def test_defaults():
    get_settings.cache_clear()
    s = get_settings()
    assert s.api_prefix == "/api-imovel-finder"
    assert s.verification_code_digits == 6
    assert s.token_backend in ("redis", "memory")


def test_env_overrides_and_cache_clear(monkeypatch):
    # override via env and ensure cache is respected
    monkeypatch.setenv("SESSION_TTL_SECONDS", "123")
    monkeypatch.setenv("TOKEN_BACKEND", "memory")
    get_settings.cache_clear()
    s = get_settings()
    assert s.session_ttl_seconds == 123
    assert s.token_backend == "memory"

    # cleanup: remove env and reset cache
    monkeypatch.delenv("SESSION_TTL_SECONDS", raising=False)
    monkeypatch.delenv("TOKEN_BACKEND", raising=False)
    get_settings.cache_clear()
    s2 = get_settings()
    assert s2.session_ttl_seconds != 123  # back to default or another env value
