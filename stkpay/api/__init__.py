"""
API Blueprints Package
Registers all API blueprints
"""

from stkpay.api.mpesa import mpesa_bp
from stkpay.api.orders import orders_bp
from stkpay.api.payments import payments_bp

__all__ = [
    'mpesa_bp',
    'orders_bp',
    'payments_bp'
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app

    Args:
        app: Flask application instance
    """

    url_base: str = '/api'

    app.register_blueprint(mpesa_bp, url_prefix=f'{url_base}/mpesa')
    app.register_blueprint(orders_bp, url_prefix=f'{url_base}/orders')
    app.register_blueprint(payments_bp, url_prefix=f'{url_base}/payment')
