"""
Tests for settings.
"""

import pytest

from edge_domains.config import Settings, get_settings


class TestSettings:
    def test_settings_loads(self, test_settings):
        assert test_settings.host == "0.0.0.0"
        assert test_settings.port == 8000
        assert test_settings.cname_target == "edge.example.com"
        assert test_settings.verification_key == "_edge-verify"
        assert test_settings.store_backend == "memory"
        assert test_settings.provider == "dry_run"

    def test_settings_env_prefix(self, monkeypatch):
        monkeypatch.setenv("EDGE_DOMAINS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("EDGE_DOMAINS_CNAME_TARGET", "edge.platform.test")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.cname_target == "edge.platform.test"

    def test_nameservers_from_json(self, monkeypatch):
        monkeypatch.setenv("EDGE_DOMAINS_DNS_NAMESERVERS", '["1.1.1.1", "8.8.8.8"]')
        assert Settings().dns_nameservers == ["1.1.1.1", "8.8.8.8"]

    def test_defaults_validate(self, test_settings):
        assert test_settings.validate_required() is True

    def test_cloudflare_requires_credentials(self):
        settings = Settings(provider="cloudflare", cloudflare_account_id="acct")
        with pytest.raises(ValueError) as exc_info:
            settings.validate_required()
        message = str(exc_info.value)
        assert "EDGE_DOMAINS_CLOUDFLARE_API_TOKEN" in message
        assert "EDGE_DOMAINS_CLOUDFLARE_ZONE_ID" in message
        assert "ACCOUNT_ID" not in message

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="STORE_BACKEND"):
            Settings(store_backend="sqlite").validate_required()

    def test_get_settings_tolerates_bad_config_in_debug(self, monkeypatch):
        monkeypatch.setenv("EDGE_DOMAINS_PROVIDER", "cloudflare")
        get_settings.cache_clear()
        try:
            settings = get_settings()
            assert settings.provider == "cloudflare"
        finally:
            get_settings.cache_clear()

    def test_get_settings_rejects_bad_config(self, monkeypatch):
        monkeypatch.setenv("EDGE_DOMAINS_PROVIDER", "cloudflare")
        monkeypatch.setenv("EDGE_DOMAINS_DEBUG", "false")
        get_settings.cache_clear()
        try:
            with pytest.raises(ValueError):
                get_settings()
        finally:
            get_settings.cache_clear()
