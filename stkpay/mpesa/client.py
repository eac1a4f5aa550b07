"""
Authenticated HTTP access to the Daraja API.

Every call is an independent ``requests.post`` with a bounded timeout; no
session or other mutable state is shared between concurrent requests.
"""

import logging
from typing import Any, Dict, Type

import requests

from stkpay.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

# Daraja base URLs
_BASE_URLS = {
    "sandbox":    "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}


def base_url_for(environment: str) -> str:
    try:
        return _BASE_URLS[environment]
    except KeyError:
        raise ConfigurationError(
            f"MPesa: environment must be 'sandbox' or 'production', got '{environment}'"
        ) from None


class DarajaClient:
    """POSTs JSON to Daraja endpoints with a bearer token from ``token_fetcher``."""

    def __init__(self, environment: str, token_fetcher, timeout: float = 30):
        self.base_url = base_url_for(environment)
        self.token_fetcher = token_fetcher
        self.timeout = timeout

    def post(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        error_cls: Type[UpstreamError] = UpstreamError,
        context: str = "",
    ) -> Dict[str, Any]:
        """
        Execute an authenticated POST and return the decoded 2xx body.

        A 401 answered to a cached token invalidates the cache and re-sends
        once with a freshly fetched token.

        Raises:
            UpstreamAuthError: If no token could be obtained
            error_cls: On transport failure or a non-2xx response, with the
                upstream body (or transport message) in ``details``
        """
        token = self.token_fetcher.get_access_token()
        resp = self._send(endpoint, payload, token.value, error_cls, context)

        if resp.status_code == 401 and self.token_fetcher.caching:
            logger.info("MPesa [%s]: cached token rejected, fetching a new one", context)
            self.token_fetcher.invalidate()
            token = self.token_fetcher.get_access_token()
            resp = self._send(endpoint, payload, token.value, error_cls, context)

        return self._handle_response(resp, error_cls, context)

    def _send(self, endpoint, payload, token, error_cls, context) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type":  "application/json",
        }
        url = f"{self.base_url}{endpoint}"
        try:
            return requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise error_cls(f"MPesa [{context}]: network error – {exc}", details=str(exc)) from exc

    @staticmethod
    def _handle_response(resp: requests.Response, error_cls, context: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}

        logger.debug("MPesa [%s] HTTP %s", context, resp.status_code)

        if not resp.ok:
            error_msg = None
            if isinstance(data, dict):
                error_msg = data.get("errorMessage") or data.get("ResultDesc")
            raise error_cls(
                f"MPesa [{context}] HTTP {resp.status_code}: {error_msg or resp.text[:300]}",
                details=data,
                upstream_status=resp.status_code,
            )

        if not isinstance(data, dict):
            raise error_cls(
                f"MPesa [{context}]: unexpected response body",
                details=data,
                upstream_status=resp.status_code,
            )
        return data
