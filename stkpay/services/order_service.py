import secrets
import time
from typing import Any, Dict, List, Optional

from stkpay.errors import OrderNotFound
from stkpay.extensions import db
from stkpay.models import Order, OrderStatus
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)


class OrderService:
    """Stores customer orders"""

    @staticmethod
    def new_order_id() -> str:
        # Millisecond stamp plus a random suffix so concurrent orders never collide
        return f'ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}'

    @staticmethod
    def create_order(
            customer_info: Optional[Dict[str, Any]],
            cart_items: Optional[List[Dict[str, Any]]],
            total: Any,
            delivery_address: Any,
            payment_method: Optional[str]
    ) -> Order:
        """
        Create an order

        Mpesa orders start as ``pending_payment`` until the STK callback
        confirms them; other payment methods start as ``pending``.
        """
        is_mpesa = (payment_method or '').strip().lower() == 'mpesa'

        order = Order(
            id=OrderService.new_order_id(),
            customer_info=customer_info,
            items=cart_items,
            total=total,
            delivery_address=delivery_address,
            payment_method=payment_method,
            status=OrderStatus.PENDING_PAYMENT.value if is_mpesa else OrderStatus.PENDING.value
        )

        db.session.add(order)
        db.session.commit()

        logger.info(f'Order created: {order.id} ({order.status}, {len(cart_items or [])} items)')
        return order

    @staticmethod
    def get_order(order_id: str) -> Order:
        order = db.session.get(Order, order_id)
        if order is None:
            raise OrderNotFound(f'Order {order_id} not found')
        return order
