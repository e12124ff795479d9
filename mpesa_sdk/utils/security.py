"""
Password, timestamp and identifier generation for M-Pesa requests.
"""

import base64
import random
import time
import uuid
from datetime import datetime

TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'


def generate_timestamp(now: datetime = None) -> str:
    """
    Get a request timestamp in the gateway's YYYYMMDDHHMMSS format.
    """
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def generate_password(shortcode: str, passkey: str, timestamp: str) -> str:
    """
    Generate the Lipa na M-Pesa online password.

    Args:
        shortcode: Business shortcode
        passkey: Passkey issued with the shortcode
        timestamp: Request timestamp (YYYYMMDDHHMMSS)

    Returns:
        base64(shortcode + passkey + timestamp)
    """
    raw = f"{shortcode}{passkey}{timestamp}"
    return base64.b64encode(raw.encode('utf-8')).decode('utf-8')


def generate_basic_credentials(consumer_key: str, consumer_secret: str) -> str:
    """Encode consumer credentials for a Basic Authorization header."""
    raw = f"{consumer_key}:{consumer_secret}"
    return base64.b64encode(raw.encode('utf-8')).decode('utf-8')


def generate_reference(prefix: str) -> str:
    """
    Generate a unique request reference.

    Returns:
        Reference of the form '<prefix>-<hex>'
    """
    return f"{prefix}-{uuid.uuid4().hex}"


def generate_third_party_trans_id() -> str:
    """Generate the ThirdPartyTransID returned for accepted C2B validations."""
    return f"TXN{int(time.time())}{random.randint(1000, 9999)}"
