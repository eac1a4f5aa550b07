from datetime import datetime
from enum import Enum

from stkpay.extensions import db


class OrderStatus(str, Enum):
    PENDING = 'pending'
    PENDING_PAYMENT = 'pending_payment'
    PAID = 'paid'
    PAYMENT_FAILED = 'payment_failed'


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.String(40), primary_key=True)

    customer_info = db.Column(db.JSON)
    items = db.Column(db.JSON)
    total = db.Column(db.Numeric(15, 2))
    delivery_address = db.Column(db.JSON)
    payment_method = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING.value)

    # Latest STK Push issued for this order
    checkout_request_id = db.Column(db.String(100), index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    payments = db.relationship('PaymentOutcome', backref='order', lazy='dynamic')

    def to_dict(self):
        return {
            'orderId': self.id,
            'customerInfo': self.customer_info,
            'items': self.items,
            'total': float(self.total) if self.total is not None else None,
            'deliveryAddress': self.delivery_address,
            'paymentMethod': self.payment_method,
            'status': self.status,
            'checkoutRequestID': self.checkout_request_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<Order {self.id} - {self.status}>'
