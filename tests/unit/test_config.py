"""
Unit Tests for configuration loading and application startup
"""

import pytest

from stkpay import create_app
from stkpay.config import GatewayCredentials, TestingConfig
from stkpay.errors import ConfigurationError
from stkpay.mpesa import MemoryTokenCache, RedisTokenCache

VALID = {
    'MPESA_CONSUMER_KEY': 'key',
    'MPESA_CONSUMER_SECRET': 'secret',
    'MPESA_BUSINESS_SHORTCODE': '174379',
    'MPESA_PASSKEY': 'passkey',
    'MPESA_CALLBACK_URL': 'https://example.com/api/mpesa/callback',
}


class TestGatewayCredentials:

    def test_loads_from_mapping(self):
        credentials = GatewayCredentials.from_config(VALID)

        assert credentials.short_code == '174379'
        assert credentials.environment == 'sandbox'

    def test_environment_is_normalised(self):
        credentials = GatewayCredentials.from_config({**VALID, 'MPESA_ENVIRONMENT': ' Production '})
        assert credentials.environment == 'production'

    @pytest.mark.parametrize('missing', sorted(VALID))
    def test_missing_secret(self, missing):
        mapping = {k: v for k, v in VALID.items() if k != missing}

        with pytest.raises(ConfigurationError) as exc_info:
            GatewayCredentials.from_config(mapping)

        assert missing in exc_info.value.message

    def test_unknown_environment(self):
        with pytest.raises(ConfigurationError):
            GatewayCredentials.from_config({**VALID, 'MPESA_ENVIRONMENT': 'staging'})

    def test_repr_hides_secrets(self):
        text = repr(GatewayCredentials.from_config(VALID))

        assert 'secret' not in text
        assert 'passkey' not in text
        assert '174379' in text

    def test_credentials_are_immutable(self):
        credentials = GatewayCredentials.from_config(VALID)

        with pytest.raises(AttributeError):
            credentials.short_code = '600000'


class TestAppStartup:

    def test_missing_passkey_fails_startup(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, 'MPESA_PASSKEY', None)

        with pytest.raises(ConfigurationError):
            create_app('testing')

    def test_unknown_token_cache_fails_startup(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, 'MPESA_TOKEN_CACHE', 'memcached')

        with pytest.raises(ConfigurationError):
            create_app('testing')

    def test_testing_config_does_not_cache_tokens(self, app):
        assert app.extensions['mpesa'].token_fetcher.cache is None

    @pytest.mark.parametrize('kind, cache_cls', [('memory', MemoryTokenCache), ('redis', RedisTokenCache)])
    def test_token_cache_selection(self, monkeypatch, kind, cache_cls):
        monkeypatch.setattr(TestingConfig, 'MPESA_TOKEN_CACHE', kind)

        app = create_app('testing')

        assert isinstance(app.extensions['mpesa'].token_fetcher.cache, cache_cls)
