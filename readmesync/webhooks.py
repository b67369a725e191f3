"""Webhook signature handling for ``X-Hub-Signature`` (HMAC-SHA1) payloads."""

import hashlib
import hmac

from readmesync.errors import BadRequestError, SignatureError

SIGNATURE_PREFIX = "sha1="


def sign_payload(body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA1 of *body* keyed with *secret*."""
    try:
        return hmac.new(secret.encode(), body, hashlib.sha1).hexdigest()
    except (AttributeError, TypeError) as exc:
        raise SignatureError(f"Cannot compute webhook digest: {exc}") from exc


def parse_signature_header(header: str | None) -> str:
    """Strip the ``sha1=`` tag from an ``X-Hub-Signature`` value.

    Raises :class:`BadRequestError` when the header is missing, too short
    or carries a different algorithm tag.
    """
    if not header or not header.startswith(SIGNATURE_PREFIX):
        raise BadRequestError("Malformed X-Hub-Signature header")
    signature = header[len(SIGNATURE_PREFIX):]
    if not signature:
        raise BadRequestError("Empty X-Hub-Signature digest")
    return signature


def verify_signature(signature_hex: str, body: bytes, secret: str) -> bool:
    """Check *signature_hex* against the HMAC-SHA1 of *body*.

    Returns False on mismatch.  Raises :class:`SignatureError` only if the
    expected digest cannot be computed.
    """
    expected = sign_payload(body, secret)
    # Compare as bytes: compare_digest rejects non-ASCII str arguments.
    received = signature_hex.encode("utf-8", errors="replace")
    return hmac.compare_digest(received, expected.encode())
