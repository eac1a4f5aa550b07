"""
Payment event hooks

Components receive an observer at construction time instead of reaching for a
module-level logger, so deployments can swap the sink (tests use a recorder).
"""

import json
import logging
from typing import Any, Optional

from stkpay.utils.logger import get_logger, redact


class PaymentEventLogger:
    """Writes one structured, redacted log line per payment event."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger('stkpay.payments')

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        payload = json.dumps(redact(fields), default=str, sort_keys=True)
        self.logger.log(level, '%s %s', event, payload)


class RecordingObserver:
    """Keeps emitted events in memory; handy for tests and local debugging."""

    def __init__(self):
        self.events = []

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        self.events.append((event, redact(fields)))

    def names(self):
        return [name for name, _ in self.events]
