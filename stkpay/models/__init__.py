from stkpay.models.order import Order, OrderStatus
from stkpay.models.payment import PaymentOutcome, PaymentStatus

__all__ = ['Order', 'OrderStatus', 'PaymentOutcome', 'PaymentStatus']
