from flask import Blueprint, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError

from stkpay.errors import OrderNotFound
from stkpay.extensions import db
from stkpay.schemas.order_schema import CreateOrderSchema
from stkpay.services.order_service import OrderService
from stkpay.utils.logger import get_logger

orders_bp = Blueprint('orders', __name__)
logger = get_logger(__name__)

create_order_schema = CreateOrderSchema()


@orders_bp.route('', methods=['POST'])
def create_order():
    """
    Save an order

    Body (JSON, or form-encoded with the same keys):
        {
            "customerInfo": {"name": "Jane", "phone": "0712345678"},
            "cartItems": [{"id": 1, "name": "Pilau", "price": 350, "quantity": 2}],
            "total": 700,
            "deliveryAddress": "Kilimani, Nairobi",
            "paymentMethod": "Mpesa"
        }
    """
    try:
        data = create_order_schema.load(request.get_json(silent=True) or request.form.to_dict())
    except MarshmallowValidationError as e:
        return jsonify({
            'success': False,
            'error': 'Validation error',
            'details': e.messages
        }), 400

    try:
        order = OrderService.create_order(
            customer_info=data['customerInfo'],
            cart_items=data['cartItems'],
            total=data['total'],
            delivery_address=data['deliveryAddress'],
            payment_method=data['paymentMethod']
        )

        return jsonify({
            'success': True,
            'orderId': order.id,
            'message': 'Order created successfully'
        }), 200

    except Exception:
        db.session.rollback()
        logger.exception('Order creation error')
        return jsonify({
            'error': 'Failed to create order'
        }), 500


@orders_bp.route('/<order_id>', methods=['GET'])
def get_order(order_id):
    """Get order details"""
    try:
        order = OrderService.get_order(order_id)
    except OrderNotFound as e:
        return jsonify({
            'success': False,
            'error': e.message
        }), 404

    return jsonify({
        'success': True,
        'data': order.to_dict()
    }), 200
