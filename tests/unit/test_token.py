"""
Unit Tests for Daraja access tokens and token caches
"""

import json
import time
from unittest.mock import patch

import pytest
import requests

from stkpay.errors import UpstreamAuthError
from stkpay.mpesa.token import (
    AccessToken,
    MemoryTokenCache,
    RedisTokenCache,
    TokenFetcher,
)

SANDBOX_TOKEN_URL = 'https://sandbox.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials'


def _expired_token():
    return AccessToken(value='old_tok', obtained_at=time.time() - 3590, expires_in=3600)


class TestAccessToken:

    def test_fresh_token_is_not_expired(self):
        token = AccessToken(value='tok', obtained_at=1000.0, expires_in=3600)
        assert not token.is_expired(now=1000.0 + 3000)

    def test_token_expires_sixty_seconds_early(self):
        token = AccessToken(value='tok', obtained_at=1000.0, expires_in=3600)
        assert token.is_expired(now=1000.0 + 3540)
        assert not token.is_expired(now=1000.0 + 3539)

    def test_dict_round_trip(self):
        token = AccessToken(value='tok', obtained_at=1000.0, expires_in=1800)
        assert AccessToken.from_dict(token.to_dict()) == token


class TestTokenFetcher:

    def test_fetch_uses_basic_auth_against_sandbox(self, credentials, token_response):
        fetcher = TokenFetcher(credentials, timeout=7)

        with patch('requests.get', return_value=token_response) as mock_get:
            token = fetcher.get_access_token()

        assert token.value == 'daraja_tok_abc'
        assert token.expires_in == 3599
        mock_get.assert_called_once_with(
            SANDBOX_TOKEN_URL,
            auth=('test_consumer_key', 'test_consumer_secret'),
            timeout=7,
        )

    def test_production_environment_uses_live_host(self, credentials, token_response):
        from dataclasses import replace
        fetcher = TokenFetcher(replace(credentials, environment='production'))

        with patch('requests.get', return_value=token_response) as mock_get:
            fetcher.get_access_token()

        assert mock_get.call_args[0][0].startswith('https://api.safaricom.co.ke/oauth/v1/generate')

    def test_missing_expires_in_defaults_to_one_hour(self, credentials, mock_response):
        fetcher = TokenFetcher(credentials)

        with patch('requests.get', return_value=mock_response({'access_token': 'tok'})):
            token = fetcher.get_access_token()

        assert token.expires_in == 3600

    def test_rejected_credentials_raise_auth_error(self, credentials, mock_response, observer):
        body = {'errorCode': '400.008.01', 'errorMessage': 'Invalid Authentication passed'}
        fetcher = TokenFetcher(credentials, observer=observer)

        with patch('requests.get', return_value=mock_response(body, status_code=400)):
            with pytest.raises(UpstreamAuthError) as exc_info:
                fetcher.get_access_token()

        assert exc_info.value.details == body
        assert exc_info.value.upstream_status == 400
        assert observer.names() == ['token.failed']

    def test_network_failure_raises_auth_error(self, credentials):
        fetcher = TokenFetcher(credentials)

        with patch('requests.get', side_effect=requests.ConnectionError('Name or service not known')):
            with pytest.raises(UpstreamAuthError) as exc_info:
                fetcher.get_access_token()

        assert 'Name or service not known' in exc_info.value.details

    def test_response_without_token_raises(self, credentials, mock_response):
        fetcher = TokenFetcher(credentials)

        with patch('requests.get', return_value=mock_response({'expires_in': '3599'})):
            with pytest.raises(UpstreamAuthError):
                fetcher.get_access_token()

    def test_without_cache_every_call_fetches(self, credentials, token_response):
        fetcher = TokenFetcher(credentials)

        with patch('requests.get', return_value=token_response) as mock_get:
            fetcher.get_access_token()
            fetcher.get_access_token()

        assert mock_get.call_count == 2
        assert not fetcher.caching

    def test_memory_cache_serves_second_call(self, credentials, token_response, observer):
        fetcher = TokenFetcher(credentials, cache=MemoryTokenCache(), observer=observer)

        with patch('requests.get', return_value=token_response) as mock_get:
            first = fetcher.get_access_token()
            second = fetcher.get_access_token()

        assert mock_get.call_count == 1
        assert first == second
        assert observer.names() == ['token.fetched', 'token.cache_hit']

    def test_token_near_expiry_is_refetched(self, credentials, token_response):
        cache = MemoryTokenCache()
        cache.set(_expired_token())
        fetcher = TokenFetcher(credentials, cache=cache)

        with patch('requests.get', return_value=token_response) as mock_get:
            token = fetcher.get_access_token()

        assert mock_get.call_count == 1
        assert token.value == 'daraja_tok_abc'

    def test_invalidate_forces_refetch(self, credentials, token_response):
        fetcher = TokenFetcher(credentials, cache=MemoryTokenCache())

        with patch('requests.get', return_value=token_response) as mock_get:
            fetcher.get_access_token()
            fetcher.invalidate()
            fetcher.get_access_token()

        assert mock_get.call_count == 2

    def test_failed_fetch_is_not_cached(self, credentials, mock_response, token_response):
        cache = MemoryTokenCache()
        fetcher = TokenFetcher(credentials, cache=cache)

        with patch('requests.get', return_value=mock_response({'error': 'down'}, status_code=503)):
            with pytest.raises(UpstreamAuthError):
                fetcher.get_access_token()

        assert cache.get() is None


class TestRedisTokenCache:

    def test_set_then_get(self, redis_client):
        cache = RedisTokenCache(redis_client, key='mpesa:access_token:174379')
        token = AccessToken(value='tok', obtained_at=time.time(), expires_in=3600)

        cache.set(token)

        assert cache.get() == token

    def test_entry_expires_before_the_token(self, redis_client):
        cache = RedisTokenCache(redis_client)
        cache.set(AccessToken(value='tok', obtained_at=time.time(), expires_in=3600))

        ttl = redis_client.ttl('mpesa:access_token')
        assert 0 < ttl <= 3540

    def test_token_inside_margin_is_not_stored(self, redis_client):
        cache = RedisTokenCache(redis_client)

        cache.set(_expired_token())

        assert redis_client.get('mpesa:access_token') is None

    def test_unreadable_entry_is_discarded(self, redis_client):
        redis_client.set('mpesa:access_token', 'not-json')
        cache = RedisTokenCache(redis_client)

        assert cache.get() is None
        assert redis_client.get('mpesa:access_token') is None

    def test_expired_payload_is_ignored(self, redis_client):
        redis_client.set('mpesa:access_token', json.dumps(_expired_token().to_dict()))

        assert RedisTokenCache(redis_client).get() is None

    def test_fetcher_shares_token_through_redis(self, credentials, token_response, redis_client):
        first = TokenFetcher(credentials, cache=RedisTokenCache(redis_client))
        second = TokenFetcher(credentials, cache=RedisTokenCache(redis_client))

        with patch('requests.get', return_value=token_response) as mock_get:
            first.get_access_token()
            token = second.get_access_token()

        assert mock_get.call_count == 1
        assert token.value == 'daraja_tok_abc'
