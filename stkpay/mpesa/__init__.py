"""
M-Pesa Payment Orchestrator
Based on the Safaricom Daraja API.

Supported flows
---------------
STK Push (Lipa na M-Pesa Online)
    POST /mpesa/stkpush/v1/processrequest
    POST /mpesa/stkpushquery/v1/query         (status poll)

Authentication
    GET  /oauth/v1/generate?grant_type=client_credentials  (Basic auth)

Callback
    Safaricom POSTs the push outcome to CallBackURL; CallbackReconciler
    records it against the CheckoutRequestID.
"""

from flask import current_app

from stkpay.mpesa.callback import CallbackAck, CallbackReconciler, CallbackResult, OutcomeStatus, OutcomeUpdate
from stkpay.mpesa.client import DarajaClient
from stkpay.mpesa.credentials import derive_credentials, generate_password, generate_timestamp, local_clock
from stkpay.mpesa.orchestrator import PaymentOrchestrator
from stkpay.mpesa.status import StatusQuery
from stkpay.mpesa.stk_push import PushRequest, PushSubmission, PushSubmitter
from stkpay.mpesa.token import AccessToken, MemoryTokenCache, RedisTokenCache, TokenFetcher


def get_orchestrator() -> PaymentOrchestrator:
    """Return the orchestrator built by create_app for the current application."""
    return current_app.extensions['mpesa']


__all__ = [
    'AccessToken',
    'CallbackAck',
    'CallbackReconciler',
    'CallbackResult',
    'DarajaClient',
    'MemoryTokenCache',
    'OutcomeStatus',
    'OutcomeUpdate',
    'PaymentOrchestrator',
    'PushRequest',
    'PushSubmission',
    'PushSubmitter',
    'RedisTokenCache',
    'StatusQuery',
    'TokenFetcher',
    'derive_credentials',
    'generate_password',
    'generate_timestamp',
    'get_orchestrator',
    'local_clock',
]
