"""
Payment Status Endpoints
"""

from flask import Blueprint, jsonify

from stkpay.errors import PaymentNotFound, UpstreamError
from stkpay.mpesa import get_orchestrator
from stkpay.services.payment_service import PaymentService
from stkpay.utils.logger import get_logger

payments_bp = Blueprint('payments', __name__)
logger = get_logger(__name__)


@payments_bp.route('/status/<checkout_request_id>', methods=['GET'])
def payment_status(checkout_request_id):
    """
    Query the gateway for the status of a push

    Path Parameters:
        - checkout_request_id: CheckoutRequestID returned by /api/mpesa/stkpush

    The gateway's response is returned as-is. When the gateway answers with an
    error body (unknown id, still processing, ...) that body is forwarded
    verbatim with a 500.
    """
    try:
        return jsonify(get_orchestrator().query_status(checkout_request_id)), 200

    except UpstreamError as e:
        logger.error(f'Payment status check error: {e.message}')
        if isinstance(e.details, dict) and e.upstream_status is not None:
            return jsonify(e.details), 500
        return jsonify({
            'error': 'Failed to check payment status',
            'details': e.details if e.details is not None else e.message
        }), 500

    except Exception:
        logger.exception('Payment status check error')
        return jsonify({
            'error': 'Failed to check payment status'
        }), 500


@payments_bp.route('/outcome/<checkout_request_id>', methods=['GET'])
def payment_outcome(checkout_request_id):
    """Return the outcome recorded from the gateway callback"""
    outcome = PaymentService.get_outcome(checkout_request_id)

    if not outcome:
        raise PaymentNotFound(f'No payment recorded for {checkout_request_id}')

    return jsonify({
        'success': True,
        'data': outcome.to_dict()
    }), 200
