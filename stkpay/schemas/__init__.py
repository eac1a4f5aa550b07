"""
Schemas Package
Marshmallow schemas for request and callback validation
"""

from stkpay.schemas.callback_schema import MPesaCallbackSchema
from stkpay.schemas.order_schema import CartItemSchema, CreateOrderSchema
from stkpay.schemas.payment_schema import StkPushSchema

__all__ = [
    'MPesaCallbackSchema',
    'CartItemSchema',
    'CreateOrderSchema',
    'StkPushSchema'
]
