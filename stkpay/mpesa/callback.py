"""
STK Push callback reconciliation.

Safaricom POSTs the outcome of a push to CallBackURL:

    {"Body": {"stkCallback": {
        "MerchantRequestID": "...", "CheckoutRequestID": "ws_CO_...",
        "ResultCode": 0, "ResultDesc": "...",
        "CallbackMetadata": {"Item": [{"Name": "Amount", "Value": 1}, ...]}}}}

CallbackMetadata is only present on success, and neither the order nor the
presence of its items is guaranteed, so every field is looked up by name.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from marshmallow import ValidationError as MarshmallowValidationError

from stkpay.errors import CallbackParseError
from stkpay.schemas.callback_schema import CallbackItemSchema, MPesaCallbackSchema
from stkpay.utils.observability import PaymentEventLogger

logger = logging.getLogger(__name__)

ACK_OK = "Callback received successfully"
ACK_ERROR = "Error processing callback"

_callback_schema = MPesaCallbackSchema()
_item_schema = CallbackItemSchema()


class OutcomeStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class OutcomeUpdate:
    """Terminal state a callback asks the store to record."""
    status: str
    merchant_request_id: Optional[str] = None
    result_code: Optional[int] = None
    result_desc: Optional[str] = None
    receipt_number: Optional[str] = None
    amount: Any = None
    payer_phone: Optional[str] = None
    transaction_date: Optional[str] = None
    failure_reason: Optional[str] = None


@dataclass(frozen=True)
class CallbackResult:
    checkout_request_id: str
    merchant_request_id: Optional[str]
    result_code: Optional[int]
    result_desc: Optional[str]
    metadata: List[Tuple[Optional[str], Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result_code == 0

    def metadata_value(self, name: str) -> Any:
        for item_name, value in self.metadata:
            if item_name == name:
                return value
        return None

    def to_outcome(self) -> OutcomeUpdate:
        if not self.succeeded:
            return OutcomeUpdate(
                status=OutcomeStatus.FAILED,
                merchant_request_id=self.merchant_request_id,
                result_code=self.result_code,
                result_desc=self.result_desc,
                failure_reason=self.result_desc,
            )

        receipt = self.metadata_value("MpesaReceiptNumber")
        phone = self.metadata_value("PhoneNumber")
        transaction_date = self.metadata_value("TransactionDate")
        return OutcomeUpdate(
            status=OutcomeStatus.CONFIRMED,
            merchant_request_id=self.merchant_request_id,
            result_code=self.result_code,
            result_desc=self.result_desc,
            receipt_number=str(receipt) if receipt is not None else None,
            amount=self.metadata_value("Amount"),
            payer_phone=str(phone) if phone is not None else None,
            transaction_date=str(transaction_date) if transaction_date is not None else None,
        )


@dataclass(frozen=True)
class CallbackAck:
    status_code: int
    message: str


def _coerce_result_code(value: Any) -> Optional[int]:
    # Daraja sends an int; some relays stringify it
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _load_items(items: List[Any]) -> List[Tuple[Optional[str], Any]]:
    metadata = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        try:
            loaded = _item_schema.load(item)
        except MarshmallowValidationError:
            logger.warning("Skipping unreadable CallbackMetadata item: %r", item)
            continue
        metadata.append((loaded["Name"], loaded["Value"]))
    return metadata


class CallbackReconciler:
    """
    Turns a raw callback into an OutcomeUpdate and hands it to ``store``.

    ``store`` is the persistence collaborator; it must provide
    ``transition_outcome(checkout_request_id, update)`` and make repeated
    identical transitions a no-op. The reconciler itself keeps no state.
    """

    def __init__(self, store, observer=None):
        self.store = store
        self.observer = observer or PaymentEventLogger()

    def parse(self, raw_body: Union[bytes, str, Mapping[str, Any], None]) -> CallbackResult:
        """
        Raises:
            CallbackParseError: Body is not JSON or not a stkCallback envelope
        """
        if isinstance(raw_body, (bytes, bytearray)):
            raw_body = raw_body.decode("utf-8", errors="replace")
        if isinstance(raw_body, str):
            try:
                raw_body = json.loads(raw_body)
            except ValueError as exc:
                raise CallbackParseError(f"Callback body is not valid JSON: {exc}") from exc

        if not isinstance(raw_body, Mapping):
            raise CallbackParseError("Callback body must be a JSON object")

        try:
            envelope = _callback_schema.load(raw_body)
        except MarshmallowValidationError as exc:
            raise CallbackParseError("Malformed stkCallback envelope", details=exc.messages) from exc

        stk = envelope["Body"]["stkCallback"]
        items = (stk.get("CallbackMetadata") or {}).get("Item") or []
        return CallbackResult(
            checkout_request_id=stk["CheckoutRequestID"],
            merchant_request_id=stk.get("MerchantRequestID"),
            result_code=_coerce_result_code(stk.get("ResultCode")),
            result_desc=stk.get("ResultDesc"),
            metadata=_load_items(items),
        )

    def reconcile(self, raw_body) -> Tuple[CallbackResult, Any, bool]:
        """Parse ``raw_body`` and record its outcome. Returns (result, stored outcome, transitioned)."""
        result = self.parse(raw_body)
        update = result.to_outcome()

        self.observer.emit(
            "callback.received",
            checkout_request_id=result.checkout_request_id,
            merchant_request_id=result.merchant_request_id,
            result_code=result.result_code,
            status=update.status,
        )

        outcome, transitioned = self.store.transition_outcome(result.checkout_request_id, update)

        if transitioned:
            self.observer.emit(
                "outcome.transitioned",
                checkout_request_id=result.checkout_request_id,
                status=update.status,
                amount=update.amount,
                receipt_number=update.receipt_number,
                payer_phone=update.payer_phone,
                failure_reason=update.failure_reason,
            )
        else:
            self.observer.emit(
                "outcome.duplicate",
                checkout_request_id=result.checkout_request_id,
                status=update.status,
            )
        return result, outcome, transitioned

    def handle_callback(self, raw_body) -> CallbackAck:
        """
        Acknowledge a delivery.

        200 once the body is parsed and recorded, whatever the payment
        outcome. 500 when the envelope is malformed or the store fails, so
        the gateway delivers again.
        """
        try:
            self.reconcile(raw_body)
        except CallbackParseError as exc:
            self.observer.emit(
                "callback.rejected", level=logging.WARNING, error=exc.message, details=exc.details
            )
            return CallbackAck(500, ACK_ERROR)
        except Exception:
            logger.exception("Callback processing error")
            return CallbackAck(500, ACK_ERROR)
        return CallbackAck(200, ACK_OK)
