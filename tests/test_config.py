"""Tests for giftwise.config — settings loading and validation."""

import pytest

from giftwise.config import Settings, _load_settings


class TestLoadSettings:
    def test_missing_llm_key_exits(self, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_placeholder_llm_key_exits(self, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "your-key-here")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_supabase_requires_url(self, monkeypatch):
        monkeypatch.setenv("STORE_PROVIDER", "supabase")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        with pytest.raises(SystemExit):
            _load_settings()

    def test_supabase_requires_a_key(self, monkeypatch):
        monkeypatch.setenv("STORE_PROVIDER", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
        monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        with pytest.raises(SystemExit):
            _load_settings()

    def test_sqlite_needs_no_supabase(self, monkeypatch):
        monkeypatch.setenv("STORE_PROVIDER", "sqlite")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        assert _load_settings().STORE_PROVIDER == "sqlite"

    def test_numeric_coercion(self, monkeypatch):
        monkeypatch.setenv("EMAIL_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("SUGGESTION_CACHE_TTL_SECONDS", "120")
        monkeypatch.setenv("DISPATCH_CONCURRENCY", "8")
        s = _load_settings()
        assert s.EMAIL_TIMEOUT_SECONDS == 2.5
        assert s.SUGGESTION_CACHE_TTL_SECONDS == 120
        assert s.DISPATCH_CONCURRENCY == 8


class TestSettings:
    def test_service_key_preferred(self):
        s = Settings(LLM_API_KEY="k", SUPABASE_SERVICE_KEY="svc", SUPABASE_ANON_KEY="anon")
        assert s.supabase_key == "svc"

    def test_anon_key_fallback(self):
        s = Settings(LLM_API_KEY="k", SUPABASE_ANON_KEY="anon")
        assert s.supabase_key == "anon"

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(LLM_API_KEY="k", DISPATCH_CONCURRENCY=0)
