"""
Daraja OAuth access tokens.

    GET /oauth/v1/generate?grant_type=client_credentials  (Basic auth)

Caching is optional. Without a cache every call fetches a fresh token. With a
cache, a token is reused until ``TOKEN_EXPIRY_MARGIN`` seconds before its
expiry; callers that still get a 401 with a cached token call
``invalidate()`` and fetch again.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from stkpay.config import GatewayCredentials
from stkpay.errors import UpstreamAuthError
from stkpay.mpesa.client import base_url_for
from stkpay.utils.observability import PaymentEventLogger

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "/oauth/v1/generate"

# Safaricom tokens expire in 3600s
DEFAULT_EXPIRES_IN = 3600
TOKEN_EXPIRY_MARGIN = 60


@dataclass(frozen=True)
class AccessToken:
    value: str
    obtained_at: float
    expires_in: int = DEFAULT_EXPIRES_IN

    @property
    def expires_at(self) -> float:
        return self.obtained_at + self.expires_in

    def is_expired(self, margin: int = TOKEN_EXPIRY_MARGIN, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at - margin

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "obtained_at": self.obtained_at, "expires_in": self.expires_in}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessToken":
        return cls(
            value=data["value"],
            obtained_at=float(data["obtained_at"]),
            expires_in=int(data["expires_in"]),
        )


class MemoryTokenCache:
    """Per-process token cache."""

    def __init__(self):
        self._token: Optional[AccessToken] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[AccessToken]:
        with self._lock:
            token = self._token
        if token is None or token.is_expired():
            return None
        return token

    def set(self, token: AccessToken) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        with self._lock:
            self._token = None


class RedisTokenCache:
    """Token cache shared by every worker that talks to the same Redis."""

    def __init__(self, redis_client, key: str = "mpesa:access_token"):
        self.redis = redis_client
        self.key = key

    def get(self) -> Optional[AccessToken]:
        cached = self.redis.get(self.key)
        if not cached:
            return None
        try:
            token = AccessToken.from_dict(json.loads(cached))
        except (ValueError, KeyError, TypeError):
            logger.warning("RedisTokenCache: discarding unreadable cache entry at %s", self.key)
            self.redis.delete(self.key)
            return None
        if token.is_expired():
            return None
        return token

    def set(self, token: AccessToken) -> None:
        ttl = int(token.expires_at - TOKEN_EXPIRY_MARGIN - time.time())
        if ttl <= 0:
            return
        self.redis.set(self.key, json.dumps(token.to_dict()), ex=ttl)

    def clear(self) -> None:
        self.redis.delete(self.key)


class TokenFetcher:
    """Obtains bearer tokens for one set of gateway credentials."""

    def __init__(
        self,
        credentials: GatewayCredentials,
        cache=None,
        timeout: float = 30,
        observer=None,
    ):
        self.credentials = credentials
        self.cache = cache
        self.timeout = timeout
        self.observer = observer or PaymentEventLogger()
        self.url = f"{base_url_for(credentials.environment)}{AUTH_ENDPOINT}?grant_type=client_credentials"

    @property
    def caching(self) -> bool:
        return self.cache is not None

    def get_access_token(self) -> AccessToken:
        """Return a usable token, serving the cache when it holds an unexpired one."""
        if self.cache is not None:
            cached = self.cache.get()
            if cached is not None:
                self.observer.emit("token.cache_hit", expires_at=cached.expires_at)
                return cached

        token = self._fetch()
        if self.cache is not None:
            self.cache.set(token)
        return token

    def invalidate(self) -> None:
        if self.cache is not None:
            self.cache.clear()
            self.observer.emit("token.invalidated")

    def _fetch(self) -> AccessToken:
        try:
            resp = requests.get(
                self.url,
                auth=(self.credentials.consumer_key, self.credentials.consumer_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self.observer.emit("token.failed", level=logging.ERROR, error=str(exc))
            raise UpstreamAuthError(
                f"MPesa: failed to obtain access token – {exc}", details=str(exc)
            ) from exc

        try:
            data = resp.json()
        except ValueError:
            data = resp.text

        if not resp.ok:
            self.observer.emit(
                "token.failed", level=logging.ERROR, http_status=resp.status_code, response=data
            )
            raise UpstreamAuthError(
                f"MPesa: failed to obtain access token – HTTP {resp.status_code}",
                details=data,
                upstream_status=resp.status_code,
            )

        if not isinstance(data, dict) or not data.get("access_token"):
            raise UpstreamAuthError(
                "MPesa: token response did not include an access_token",
                details=data,
                upstream_status=resp.status_code,
            )

        try:
            expires_in = int(data.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        token = AccessToken(value=data["access_token"], obtained_at=time.time(), expires_in=expires_in)
        self.observer.emit("token.fetched", expires_in=expires_in)
        logger.debug("MPesa: access token refreshed (expires in %ds)", expires_in)
        return token
