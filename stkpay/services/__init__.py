from stkpay.services.order_service import OrderService
from stkpay.services.payment_service import PaymentService

__all__ = ['OrderService', 'PaymentService']
