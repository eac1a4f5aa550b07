"""
M-Pesa API Endpoints
STK Push initiation and the gateway callback
"""

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError

from stkpay.errors import AppError, UpstreamError, ValidationError
from stkpay.extensions import db
from stkpay.mpesa import PushRequest, get_orchestrator
from stkpay.schemas.payment_schema import REQUIRED_MESSAGE, StkPushSchema
from stkpay.services.order_service import OrderService
from stkpay.services.payment_service import PaymentService
from stkpay.utils.logger import get_logger

mpesa_bp = Blueprint('mpesa', __name__)
logger = get_logger(__name__)

stk_push_schema = StkPushSchema()


@mpesa_bp.route('/stkpush', methods=['POST'])
def stk_push():
    """
    Initiate an STK Push

    Body (JSON, or form-encoded with the same keys):
        {
            "phoneNumber": "0712345678",
            "amount": 500,
            "accountReference": "ORD-1700000000000-A1B2C3",   // optional
            "description": "Lunch order",                      // optional
            "orderId": "ORD-1700000000000-A1B2C3"              // optional, links the payment
        }
    """
    try:
        data = stk_push_schema.load(request.get_json(silent=True) or request.form.to_dict())
    except MarshmallowValidationError as e:
        missing = any(REQUIRED_MESSAGE in msgs for msgs in e.messages.values() if isinstance(msgs, list))
        return jsonify({
            'success': False,
            'error': REQUIRED_MESSAGE if missing else 'Validation error',
            'details': e.messages
        }), 400

    try:
        if data['orderId']:
            OrderService.get_order(data['orderId'])

        submission = get_orchestrator().submit(PushRequest(
            phone_number=data['phoneNumber'],
            amount=data['amount'],
            account_reference=data['accountReference'],
            description=data['description']
        ))

        try:
            PaymentService.create_pending_outcome(submission.checkout_request_id, {
                'merchant_request_id': submission.merchant_request_id,
                'phone_number': submission.phone_number,
                'amount': submission.amount,
                'account_reference': submission.account_reference,
                'description': submission.description,
                'order_id': data['orderId']
            })
        except Exception:
            # The push is already on the customer's phone; the callback records the outcome
            db.session.rollback()
            logger.exception(f'Failed to record pending payment {submission.checkout_request_id}')

        return jsonify({
            'success': True,
            'message': 'STK Push initiated successfully',
            'data': submission.raw_response,
            'checkoutRequestID': submission.checkout_request_id
        }), 200

    except ValidationError as e:
        return jsonify({
            'success': False,
            'error': e.error,
            'details': e.message
        }), e.status_code

    except UpstreamError as e:
        logger.error(f'STK Push error: {e.message}')
        return jsonify({
            'success': False,
            'error': 'Failed to initiate STK Push',
            'details': e.details if e.details is not None else e.message
        }), 500

    except AppError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        logger.exception('STK Push error')
        return jsonify({
            'success': False,
            'error': 'Failed to initiate STK Push',
            'details': str(e)
        }), 500


@mpesa_bp.route('/callback', methods=['POST'])
def mpesa_callback():
    """
    Receive the STK Push result from Safaricom

    Always answers 200 once the envelope is parsed and recorded; 500 makes
    the gateway deliver again.
    """
    ack = get_orchestrator().handle_callback(request.get_data())
    return ack.message, ack.status_code, {'Content-Type': 'text/plain; charset=utf-8'}
