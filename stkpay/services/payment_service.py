"""
Payment Service
Stores payment outcomes keyed by CheckoutRequestID
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from stkpay.extensions import db
from stkpay.models import Order, OrderStatus, PaymentOutcome, PaymentStatus
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

_REQUEST_FIELDS = ('merchant_request_id', 'phone_number', 'amount', 'account_reference', 'description')

_ORDER_STATUS_FOR = {
    PaymentStatus.CONFIRMED.value: OrderStatus.PAID.value,
    PaymentStatus.FAILED.value: OrderStatus.PAYMENT_FAILED.value,
}


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class PaymentService:
    """Persistence collaborator for the payment orchestrator"""

    @staticmethod
    def get_outcome(checkout_request_id: str) -> Optional[PaymentOutcome]:
        """Get payment outcome by CheckoutRequestID"""
        return PaymentOutcome.query.filter_by(checkout_request_id=checkout_request_id).first()

    @staticmethod
    def create_pending_outcome(checkout_request_id: str, initial_data: Optional[Dict[str, Any]] = None) -> PaymentOutcome:
        """
        Record a pending outcome for a submitted push

        Args:
            checkout_request_id: Correlation id returned by the gateway
            initial_data: merchant_request_id, phone_number, amount,
                account_reference, description, order_id (all optional)

        Returns:
            The stored PaymentOutcome. If a callback already created the row,
            only the missing request fields are filled in.
        """
        initial_data = initial_data or {}

        outcome = PaymentService.get_outcome(checkout_request_id)
        if outcome is None:
            PaymentService._insert_pending(checkout_request_id, initial_data)
            outcome = PaymentService.get_outcome(checkout_request_id)
        else:
            for field in _REQUEST_FIELDS:
                if getattr(outcome, field) is None and initial_data.get(field) is not None:
                    setattr(outcome, field, initial_data[field])

        order_id = initial_data.get('order_id')
        if order_id and outcome.order_id is None:
            order = db.session.get(Order, order_id)
            if order is not None:
                outcome.order_id = order.id
                order.checkout_request_id = checkout_request_id
                PaymentService._apply_order_status(outcome, order)
            else:
                logger.warning(f'Order {order_id} not found for {checkout_request_id}; outcome left unlinked')

        db.session.commit()
        return outcome

    @staticmethod
    def transition_outcome(checkout_request_id: str, result) -> Tuple[PaymentOutcome, bool]:
        """
        Move a pending outcome to its terminal state, exactly once

        The conditional UPDATE (``WHERE status = 'pending'``) makes the
        database the single writer per CheckoutRequestID: of two concurrent
        or repeated deliveries only one matches a row.

        Args:
            checkout_request_id: Correlation id from the callback envelope
            result: OutcomeUpdate produced by the callback reconciler

        Returns:
            Tuple of (stored outcome, whether this call changed it)
        """
        if PaymentService.get_outcome(checkout_request_id) is None:
            logger.warning(f'Callback for unknown CheckoutRequestID {checkout_request_id}; recording it')
            PaymentService._insert_pending(
                checkout_request_id, {'merchant_request_id': result.merchant_request_id}
            )

        now = datetime.utcnow()
        values = {
            'status': result.status,
            'result_code': result.result_code,
            'result_desc': result.result_desc,
            'receipt_number': result.receipt_number,
            'paid_amount': _to_decimal(result.amount),
            'payer_phone': result.payer_phone,
            'transaction_date': result.transaction_date,
            'failure_reason': result.failure_reason,
            'completed_at': now,
            'updated_at': now,
        }

        statement = (
            update(PaymentOutcome)
            .where(
                PaymentOutcome.checkout_request_id == checkout_request_id,
                PaymentOutcome.status == PaymentStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        transitioned = db.session.execute(statement).rowcount == 1
        db.session.commit()

        outcome = PaymentService.get_outcome(checkout_request_id)

        if transitioned and outcome.merchant_request_id is None and result.merchant_request_id:
            outcome.merchant_request_id = result.merchant_request_id

        if transitioned and outcome.order_id:
            PaymentService._apply_order_status(outcome, db.session.get(Order, outcome.order_id))

        db.session.commit()
        return outcome, transitioned

    @staticmethod
    def _insert_pending(checkout_request_id: str, data: Dict[str, Any]) -> None:
        outcome = PaymentOutcome(
            checkout_request_id=checkout_request_id,
            status=PaymentStatus.PENDING.value,
            **{field: data.get(field) for field in _REQUEST_FIELDS}
        )
        db.session.add(outcome)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request inserted the same CheckoutRequestID first
            db.session.rollback()

    @staticmethod
    def _apply_order_status(outcome: PaymentOutcome, order: Optional[Order]) -> None:
        if order is None:
            return
        new_status = _ORDER_STATUS_FOR.get(outcome.status)
        if new_status and order.status != new_status:
            order.status = new_status
