"""HMAC verification for GitHub webhook deliveries.

GitHub signs each delivery with ``X-Hub-Signature-256: sha256=<hexdigest>``,
an HMAC-SHA256 of the raw request body keyed by the shared secret.
"""

from __future__ import annotations

import hashlib
import hmac

from .errors import AuthenticationError

SIGNATURE_HEADER = "X-Hub-Signature-256"
_PREFIX = "sha256="


def sign_payload(secret: str, body: bytes) -> str:
    """Return the ``X-Hub-Signature-256`` value for *body*.

    Examples
    --------
    >>> sign_payload("s3cret", b"{}")[:7]
    'sha256='

    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, header: str | None) -> None:
    """Check *header* against the HMAC of *body*.

    The comparison is constant time and runs on bytes, so headers holding
    non-ASCII characters fail like any other mismatch.

    Raises
    ------
    AuthenticationError
        If the header is absent, lacks the ``sha256=`` prefix, or does not
        match the expected digest.

    """
    if not header:
        raise AuthenticationError.missing_signature()
    if not header.startswith(_PREFIX):
        raise AuthenticationError.invalid_signature()
    expected = sign_payload(secret, body).encode("ascii")
    if not hmac.compare_digest(expected, header.strip().encode("utf-8")):
        raise AuthenticationError.invalid_signature()
