"""
STK Push status query.

    POST /mpesa/stkpushquery/v1/query

A direct proxy to the gateway. It never consults stored outcomes, so a
client can learn the result of a push even when the callback was lost.
"""

import logging
from typing import Any, Dict, Optional

from stkpay.config import GatewayCredentials
from stkpay.errors import UpstreamQueryError, ValidationError
from stkpay.mpesa.credentials import Clock, derive_credentials
from stkpay.utils.observability import PaymentEventLogger

STK_QUERY_ENDPOINT = "/mpesa/stkpushquery/v1/query"


class StatusQuery:

    def __init__(self, credentials: GatewayCredentials, client, clock: Optional[Clock] = None, observer=None):
        self.credentials = credentials
        self.client = client
        self.clock = clock
        self.observer = observer or PaymentEventLogger()

    def query_status(self, checkout_request_id: str) -> Dict[str, Any]:
        """
        Return the gateway's response for ``checkout_request_id`` unmodified.

        Raises:
            ValidationError: Empty correlation id
            UpstreamAuthError: Token could not be obtained
            UpstreamQueryError: Gateway error response (body kept verbatim in
                ``details``) or transport failure
        """
        if not checkout_request_id or not str(checkout_request_id).strip():
            raise ValidationError("CheckoutRequestID is required")

        timestamp, password = derive_credentials(
            self.credentials.short_code, self.credentials.pass_key, self.clock
        )
        payload = {
            "BusinessShortCode": self.credentials.short_code,
            "Password":          password,
            "Timestamp":         timestamp,
            "CheckoutRequestID": checkout_request_id,
        }

        try:
            resp = self.client.post(STK_QUERY_ENDPOINT, payload, UpstreamQueryError, context="stk_query")
        except UpstreamQueryError as exc:
            self.observer.emit(
                "status.failed", level=logging.WARNING,
                checkout_request_id=checkout_request_id,
                http_status=exc.upstream_status,
                upstream=exc.details,
            )
            raise

        self.observer.emit(
            "status.queried",
            checkout_request_id=checkout_request_id,
            result_code=resp.get("ResultCode"),
        )
        return resp
