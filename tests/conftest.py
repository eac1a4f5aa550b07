"""
Pytest Configuration and Fixtures
"""
import json
from datetime import datetime
from unittest.mock import Mock

import fakeredis
import pytest

from stkpay import create_app
from stkpay.config import GatewayCredentials
from stkpay.extensions import db as _db
from stkpay.utils.observability import RecordingObserver


@pytest.fixture(scope='function')
def app():
    """Create application for testing (sqlite in-memory)"""
    app = create_app('testing')

    ctx = app.app_context()
    ctx.push()
    _db.create_all()

    yield app

    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(scope='function')
def session(app):
    """Database session bound to the test app"""
    return _db.session


@pytest.fixture(scope='function')
def client(app):
    """Create a test client"""
    return app.test_client()


@pytest.fixture(scope="function")
def redis_client():
    """Fake Redis for token cache tests"""
    fake_redis = fakeredis.FakeStrictRedis(decode_responses=True)

    yield fake_redis

    fake_redis.flushall()


@pytest.fixture
def credentials():
    return GatewayCredentials(
        consumer_key='test_consumer_key',
        consumer_secret='test_consumer_secret',
        short_code='174379',
        pass_key='test_passkey',
        callback_url='https://example.com/api/mpesa/callback',
        environment='sandbox',
    )


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2024-03-15 14:30:05"""
    return lambda: datetime(2024, 3, 15, 14, 30, 5)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def mock_response():
    """Factory for mock requests.Response objects"""
    def _make(json_data=None, status_code=200, text=None):
        resp = Mock()
        resp.ok = 200 <= status_code < 400
        resp.status_code = status_code
        if json_data is None:
            resp.json.side_effect = ValueError('No JSON object could be decoded')
            resp.text = text or ''
        else:
            resp.json.return_value = json_data
            resp.text = text if text is not None else json.dumps(json_data)
        resp.headers = {'Content-Type': 'application/json'}
        return resp
    return _make


@pytest.fixture
def token_response(mock_response):
    """Valid Daraja OAuth token response (expires in ~1 hour)"""
    return mock_response({'access_token': 'daraja_tok_abc', 'expires_in': '3599'})


@pytest.fixture
def stk_push_response(mock_response):
    return mock_response({
        'MerchantRequestID': '29115-34620561-1',
        'CheckoutRequestID': 'ws_CO_191220191020363925',
        'ResponseCode': '0',
        'ResponseDescription': 'Success. Request accepted for processing',
        'CustomerMessage': 'Success. Request accepted for processing'
    })


@pytest.fixture
def stk_callback():
    """Factory for gateway callback envelopes"""
    def _make(checkout_request_id='ws_CO_191220191020363925', result_code=0,
              result_desc='The service request is processed successfully.',
              items=None, merchant_request_id='29115-34620561-1'):
        callback = {
            'MerchantRequestID': merchant_request_id,
            'CheckoutRequestID': checkout_request_id,
            'ResultCode': result_code,
            'ResultDesc': result_desc,
        }
        if items is not None:
            callback['CallbackMetadata'] = {'Item': items}
        return {'Body': {'stkCallback': callback}}
    return _make


@pytest.fixture
def success_items():
    return [
        {'Name': 'Amount', 'Value': 500},
        {'Name': 'MpesaReceiptNumber', 'Value': 'NLJ7RT61SV'},
        {'Name': 'TransactionDate', 'Value': 20191219102115},
        {'Name': 'PhoneNumber', 'Value': 254708374149},
    ]
