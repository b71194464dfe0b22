import hmac, hashlib
from src.shared.security import sign_hub_payload, verify_hub_signature

def test_valid_signature():
    secret = "s3cr3t"
    body = b'{"hello":"world"}'
    sig = "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    assert verify_hub_signature(body, secret, sig) is True

def test_invalid_signature():
    secret = "s3cr3t"
    body = b'{"hello":"world"}'
    sig = "sha256=deadbeef"
    assert verify_hub_signature(body, secret, sig) is False

def test_sign_matches_verify():
    body = b'{"correlationKey":"alice@example.com","resourceId":"T-1"}'
    assert sign_hub_payload(body, "s3cr3t").startswith("sha256=")
    assert verify_hub_signature(body, "s3cr3t", sign_hub_payload(body, "s3cr3t")) is True
    assert verify_hub_signature(body, "other", sign_hub_payload(body, "s3cr3t")) is False

def test_malformed_header_is_invalid():
    assert verify_hub_signature(b"{}", "s3cr3t", "") is False
    assert verify_hub_signature(b"{}", "s3cr3t", "deadbeef") is False
    assert verify_hub_signature(b"{}", "s3cr3t", "sha1=" + sign_hub_payload(b"{}", "s3cr3t").split("=", 1)[1]) is False
