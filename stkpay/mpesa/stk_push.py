"""
STK Push (Lipa na M-Pesa Online) submission.

    POST /mpesa/stkpush/v1/processrequest
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from stkpay.config import GatewayCredentials
from stkpay.errors import UpstreamSubmitError, ValidationError
from stkpay.mpesa.credentials import Clock, derive_credentials
from stkpay.utils.observability import PaymentEventLogger
from stkpay.utils.validators import normalize_phone, validate_amount

STK_PUSH_ENDPOINT = "/mpesa/stkpush/v1/processrequest"

TRANSACTION_TYPE = "CustomerPayBillOnline"
DEFAULT_ACCOUNT_REFERENCE = "Food Order"
DEFAULT_DESCRIPTION = "Payment for food order"


@dataclass(frozen=True)
class PushRequest:
    phone_number: Optional[str]
    amount: Optional[int]
    account_reference: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PushSubmission:
    checkout_request_id: str
    merchant_request_id: Optional[str]
    phone_number: str
    amount: int
    account_reference: str
    description: str
    raw_response: Dict[str, Any]


class PushSubmitter:
    """Builds and sends payment-initiation requests."""

    def __init__(self, credentials: GatewayCredentials, client, clock: Optional[Clock] = None, observer=None):
        self.credentials = credentials
        self.client = client
        self.clock = clock
        self.observer = observer or PaymentEventLogger()

    def submit(self, request: PushRequest) -> PushSubmission:
        """
        Send an STK Push for ``request``.

        Validation happens before a token is requested, so bad input never
        reaches the network.

        Raises:
            ValidationError: Missing phone/amount or a non-positive amount
            InvalidPhoneFormat: Phone number cannot be normalised
            UpstreamAuthError: Token could not be obtained
            UpstreamSubmitError: Gateway rejected the push or was unreachable
        """
        if not request.phone_number or request.amount is None:
            raise ValidationError("Phone number and amount are required")

        is_valid, error = validate_amount(request.amount)
        if not is_valid:
            raise ValidationError(error)

        phone = normalize_phone(request.phone_number)
        amount = int(request.amount)
        account_reference = request.account_reference or DEFAULT_ACCOUNT_REFERENCE
        description = request.description or DEFAULT_DESCRIPTION

        timestamp, password = derive_credentials(
            self.credentials.short_code, self.credentials.pass_key, self.clock
        )
        payload = self.build_payload(phone, amount, account_reference, description, timestamp, password)

        try:
            resp = self.client.post(STK_PUSH_ENDPOINT, payload, UpstreamSubmitError, context="stk_push")
        except UpstreamSubmitError as exc:
            self.observer.emit(
                "push.failed", level=logging.ERROR,
                phone_number=phone, amount=amount, error=exc.message, upstream=exc.details,
            )
            raise

        checkout_request_id = resp.get("CheckoutRequestID")
        if not checkout_request_id:
            self.observer.emit("push.failed", level=logging.ERROR, phone_number=phone, upstream=resp)
            raise UpstreamSubmitError(
                "MPesa [stk_push]: response did not include a CheckoutRequestID", details=resp
            )

        self.observer.emit(
            "push.submitted",
            checkout_request_id=checkout_request_id,
            merchant_request_id=resp.get("MerchantRequestID"),
            phone_number=phone,
            amount=amount,
        )
        return PushSubmission(
            checkout_request_id=checkout_request_id,
            merchant_request_id=resp.get("MerchantRequestID"),
            phone_number=phone,
            amount=amount,
            account_reference=account_reference,
            description=description,
            raw_response=resp,
        )

    def build_payload(
        self,
        phone: str,
        amount: int,
        account_reference: str,
        description: str,
        timestamp: str,
        password: str,
    ) -> Dict[str, Any]:
        short_code = self.credentials.short_code
        return {
            "BusinessShortCode": short_code,
            "Password":          password,
            "Timestamp":         timestamp,
            "TransactionType":   TRANSACTION_TYPE,
            "Amount":            amount,
            "PartyA":            phone,
            "PartyB":            short_code,
            "PhoneNumber":       phone,
            "CallBackURL":       self.credentials.callback_url,
            "AccountReference":  account_reference,
            "TransactionDesc":   description,
        }
