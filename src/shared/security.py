# src/shared/security.py

import hashlib
import hmac


def sign_hub_payload(payload: bytes, secret: str) -> str:
    """Return the ``sha256=<hexdigest>`` header value for a raw body."""
    mac = hmac.new(secret.encode("utf-8"), msg=payload, digestmod=hashlib.sha256)
    return "sha256=" + mac.hexdigest()


def verify_hub_signature(payload: bytes, secret: str, signature_header: str) -> bool:
    """
    X-Hub-Signature-256: sha256=<hexdigest>

    Constant-time comparison; any malformed header is simply invalid.
    """
    if not signature_header or "=" not in signature_header:
        return False
    method, hexdigest = signature_header.split("=", 1)
    if method.lower() != "sha256":
        return False
    expected = sign_hub_payload(payload, secret).split("=", 1)[1]
    return hmac.compare_digest(expected, hexdigest.strip().lower())
