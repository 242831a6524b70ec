"""Access token inspection and pre-flight session checks."""

import logging
import math
import time
from collections.abc import Callable
from typing import Any

import jwt

from .consts import SESSION_EXPIRED_KEY
from .endpoints import EndpointKind, classify_endpoint
from .exceptions import SessionExpiredError
from .protocols import Translator
from .storage import SessionStore

logger = logging.getLogger("allocation-client.auth")


def decode_claims(token: str) -> dict[str, Any]:
    """Decode the claims segment of a JWT WITHOUT verifying its signature.

    This only reads what the token says about itself. It is not an
    authentication check; the backend remains the only verifier.

    Args:
        token: Dot-separated ``header.claims.signature`` string.

    Returns:
        The claims as a dict.

    Raises:
        jwt.PyJWTError: If the token has too few segments, a segment is not
            base64url, or the claims are not a JSON object.
    """
    return jwt.decode(token, options={"verify_signature": False})


def is_token_expired(token: str, now: float | None = None) -> bool:
    """Check the ``exp`` claim of a token. Fails closed.

    Any token that cannot be decoded, or whose ``exp`` is missing or not a
    finite number, counts as expired. Never raises.

    Args:
        token: Encoded JWT.
        now: Current time in seconds since epoch. Defaults to time.time().
    """
    try:
        claims = decode_claims(token)
    except jwt.PyJWTError:
        return True

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return True
    if not math.isfinite(exp):
        return True

    current = time.time() if now is None else now
    return current >= exp


class TokenGuard:
    """Pre-flight token validation for outgoing requests.

    Responsibilities:
    - Skip auth and public endpoints entirely
    - Fail a protected request before any I/O when the stored token has expired
    - Tear down the session (token and user only) and notify the application
    """

    def __init__(
        self,
        session: SessionStore,
        translate: Translator,
        on_expired: Callable[[], None],
    ):
        """Initialize TokenGuard.

        Args:
            session: Persisted session accessor.
            translate: Message lookup for the session-expired message.
            on_expired: Called after the session is cleared.
        """
        self.session = session
        self.translate = translate
        self.on_expired = on_expired

    def validate_for_request(self, endpoint: str) -> None:
        """Raise SessionExpiredError if a protected request carries a dead token.

        A missing token is not an error here; the backend answers that with 401.
        """
        if classify_endpoint(endpoint) is not EndpointKind.PROTECTED:
            return

        token = self.session.token
        if token and is_token_expired(token):
            logger.warning(f"Stored token expired, aborting request to {endpoint}")
            self.session.clear_expired()
            self.on_expired()
            raise SessionExpiredError(
                self.translate(SESSION_EXPIRED_KEY),
                context={"endpoint": endpoint, "stage": "pre-flight"},
            )
