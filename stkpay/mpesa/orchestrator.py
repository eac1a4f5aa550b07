from typing import Any, Dict, Optional

from stkpay.config import GatewayCredentials
from stkpay.mpesa.callback import CallbackAck, CallbackReconciler
from stkpay.mpesa.client import DarajaClient
from stkpay.mpesa.credentials import Clock
from stkpay.mpesa.status import StatusQuery
from stkpay.mpesa.stk_push import PushRequest, PushSubmission, PushSubmitter
from stkpay.mpesa.token import AccessToken, TokenFetcher
from stkpay.utils.observability import PaymentEventLogger


class PaymentOrchestrator:
    """
    Entry point for STK Push payments.

    Built once per process from immutable credentials. ``store`` is the
    persistence collaborator used by callback reconciliation.
    """

    def __init__(
        self,
        credentials: GatewayCredentials,
        store,
        token_cache=None,
        timeout: float = 30,
        clock: Optional[Clock] = None,
        observer=None,
    ):
        self.credentials = credentials
        self.observer = observer or PaymentEventLogger()

        self.token_fetcher = TokenFetcher(credentials, cache=token_cache, timeout=timeout, observer=self.observer)
        self.client = DarajaClient(credentials.environment, self.token_fetcher, timeout=timeout)
        self.submitter = PushSubmitter(credentials, self.client, clock=clock, observer=self.observer)
        self.reconciler = CallbackReconciler(store, observer=self.observer)
        self.status_query = StatusQuery(credentials, self.client, clock=clock, observer=self.observer)

    def get_access_token(self) -> AccessToken:
        return self.token_fetcher.get_access_token()

    def submit(self, request: PushRequest) -> PushSubmission:
        return self.submitter.submit(request)

    def reconcile(self, raw_body):
        return self.reconciler.reconcile(raw_body)

    def handle_callback(self, raw_body) -> CallbackAck:
        return self.reconciler.handle_callback(raw_body)

    def query_status(self, checkout_request_id: str) -> Dict[str, Any]:
        return self.status_query.query_status(checkout_request_id)
