import uuid
from datetime import datetime
from enum import Enum

from stkpay.extensions import db


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    FAILED = 'failed'


class PaymentOutcome(db.Model):
    __tablename__ = 'payment_outcomes'

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    # Gateway correlation
    checkout_request_id = db.Column(db.String(100), unique=True, nullable=False, index=True)
    merchant_request_id = db.Column(db.String(100))
    order_id = db.Column(db.String(40), db.ForeignKey('orders.id'), index=True)

    # Push request
    phone_number = db.Column(db.String(20))
    amount = db.Column(db.Integer)
    account_reference = db.Column(db.String(100))
    description = db.Column(db.String(255))

    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)

    # Callback result
    result_code = db.Column(db.Integer)
    result_desc = db.Column(db.String(255))
    receipt_number = db.Column(db.String(50))
    paid_amount = db.Column(db.Numeric(15, 2))
    payer_phone = db.Column(db.String(20))
    transaction_date = db.Column(db.String(20))
    failure_reason = db.Column(db.String(255))

    # Timestamps
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = db.Column(db.DateTime)

    @property
    def is_terminal(self):
        return self.status != PaymentStatus.PENDING.value

    def to_dict(self):
        return {
            'id': str(self.id),
            'checkout_request_id': self.checkout_request_id,
            'merchant_request_id': self.merchant_request_id,
            'order_id': self.order_id,
            'phone_number': self.phone_number,
            'amount': self.amount,
            'account_reference': self.account_reference,
            'description': self.description,
            'status': self.status,
            'result_code': self.result_code,
            'result_desc': self.result_desc,
            'receipt_number': self.receipt_number,
            'paid_amount': float(self.paid_amount) if self.paid_amount is not None else None,
            'payer_phone': self.payer_phone,
            'transaction_date': self.transaction_date,
            'failure_reason': self.failure_reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }

    def __repr__(self):
        return f'<PaymentOutcome {self.checkout_request_id} - {self.status}>'
