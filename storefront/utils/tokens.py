# storefront/utils/tokens.py
import base64
import binascii
import json
import time


def token_expiry(token: str | None) -> float | None:
    """
    Zwraca pole `exp` z payloadu JWT albo None, gdy token nie jest JWT
    (np. token DRF) lub nie ma daty wygaśnięcia.
    """
    if not token or token.count(".") != 2:
        return None

    payload = token.split(".")[1]
    payload += "=" * (-len(payload) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(payload.encode()))
    except (binascii.Error, ValueError):
        return None

    exp = data.get("exp") if isinstance(data, dict) else None
    return float(exp) if isinstance(exp, (int, float)) else None


def token_expired(token: str | None, leeway_seconds: float = 0) -> bool:
    exp = token_expiry(token)
    if exp is None:
        return False
    return time.time() + leeway_seconds >= exp
