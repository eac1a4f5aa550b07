"""
Lipa na M-Pesa Online request credentials.

Password  = Base64(BusinessShortCode + Passkey + Timestamp)
Timestamp = YYYYMMDDHHmmss in the merchant's local time
"""

import base64
from datetime import datetime
from typing import Callable, Optional, Tuple
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def local_clock(tz_name: Optional[str] = None) -> Clock:
    """Return a clock for ``tz_name``; process-local time when no zone is given."""
    if not tz_name:
        return datetime.now
    zone = ZoneInfo(tz_name)
    return lambda: datetime.now(zone)


def generate_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def generate_password(short_code: str, pass_key: str, timestamp: str) -> str:
    raw = f"{short_code}{pass_key}{timestamp}"
    return base64.b64encode(raw.encode("utf-8")).decode("utf-8")


def derive_credentials(short_code: str, pass_key: str, clock: Optional[Clock] = None) -> Tuple[str, str]:
    """
    Generate a fresh (timestamp, password) pair.

    Both values come from a single clock reading so the password always embeds
    the timestamp sent alongside it.
    """
    timestamp = generate_timestamp((clock or datetime.now)())
    return timestamp, generate_password(short_code, pass_key, timestamp)
