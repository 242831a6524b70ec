"""Response decoding and error normalization.

Every failed request leaves the client as an ApiError. Non-2xx responses go
through ErrorNormalizer.raise_for_response(); transport failures go through
ErrorNormalizer.from_transport_error().
"""

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx

from .cancellation import RequestAborted
from .consts import (
    DEFAULT_ERROR_MESSAGE,
    JSON_CONTENT_TYPE,
    NETWORK_ERROR_KEY,
    REQUEST_TIMEOUT_KEY,
    SESSION_EXPIRED_KEY,
)
from .endpoints import EndpointKind, classify_endpoint
from .exceptions import (
    ApiError,
    NetworkError,
    RequestTimeoutError,
    SessionExpiredError,
)
from .protocols import Translator
from .storage import SessionStore

logger = logging.getLogger("allocation-client.errors")


def parse_response(response: httpx.Response) -> Any:
    """Decode a successful response.

    JSON content types are parsed; anything else, including a 204 with no
    content type or an empty JSON body, yields an empty dict.
    """
    content_type = response.headers.get("content-type")
    if content_type and JSON_CONTENT_TYPE in content_type:
        if not response.content:
            return {}
        return response.json()
    return {}


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def extract_error_message(data: Any) -> str | None:
    """Pull a human-readable message out of an error body.

    Priority: ``message``, then ``error`` (string or object with a message),
    then ``errors`` (list of strings/objects, or a field -> message mapping,
    joined with ", ").

    Returns:
        The message, or None if the body carries nothing usable.
    """
    if not isinstance(data, dict):
        return None

    if _non_blank(data.get("message")):
        return data["message"]

    nested = data.get("error")
    if _non_blank(nested):
        return nested
    if isinstance(nested, dict) and _non_blank(nested.get("message")):
        return nested["message"]

    errors = data.get("errors")
    if isinstance(errors, list):
        messages = []
        for item in errors:
            if item is None:
                continue
            if isinstance(item, dict) and isinstance(item.get("message"), str):
                messages.append(item["message"])
            elif isinstance(item, dict | list):
                messages.append(json.dumps(item))
            else:
                messages.append(str(item))
        messages = [m for m in messages if m.strip()]
        if messages:
            return ", ".join(messages)
    elif isinstance(errors, dict):
        field_errors = [m for m in errors.values() if _non_blank(m)]
        if field_errors:
            return ", ".join(field_errors)

    return None


class ErrorNormalizer:
    """Converts failed responses and transport failures into ApiError.

    Responsibilities:
    - Extract the backend's message and details from error bodies
    - Detect session expiration on 401 and tear the session down
    - Map timeouts and connectivity failures to localized messages
    """

    def __init__(
        self,
        session: SessionStore,
        translate: Translator,
        on_session_expired: Callable[[], None],
    ):
        self.session = session
        self.translate = translate
        self.on_session_expired = on_session_expired

    def raise_for_response(self, response: httpx.Response, endpoint: str) -> None:
        """Raise the normalized error for a non-2xx response.

        Raises:
            SessionExpiredError: 401 on a protected endpoint with no message.
            ApiError: Every other failure.
        """
        status = response.status_code
        message = DEFAULT_ERROR_MESSAGE
        details = None

        try:
            data = response.json()
        except ValueError:
            message = response.reason_phrase or f"HTTP {status}"
        else:
            extracted = extract_error_message(data)
            if extracted:
                message = extracted
            if isinstance(data, dict) and "details" in data:
                details = data["details"]

        # NOTE: a 401 without a backend message is read as "session expired".
        # A backend that starts sending bare 401s for deliberate denials
        # would log users out; change only together with the backend contract.
        if (
            status == 401
            and classify_endpoint(endpoint) is EndpointKind.PROTECTED
            and message == DEFAULT_ERROR_MESSAGE
        ):
            logger.warning(f"401 without message from {endpoint}, ending session")
            self.session.clear_all()
            self.on_session_expired()
            raise SessionExpiredError(
                self.translate(SESSION_EXPIRED_KEY),
                status=status,
                response=response,
                details=details,
                context={"endpoint": endpoint, "stage": "response"},
            )

        logger.debug(f"{endpoint} failed with {status}: {message}")
        raise ApiError(
            message,
            status=status,
            response=response,
            details=details,
            context={"endpoint": endpoint},
        )

    def from_transport_error(self, error: Exception) -> ApiError | None:
        """Translate a transport exception, or return None to re-raise it as is."""
        if isinstance(error, ApiError):
            return error
        if isinstance(error, RequestAborted | httpx.TimeoutException | TimeoutError):
            return RequestTimeoutError(
                self.translate(REQUEST_TIMEOUT_KEY),
                errors=[str(error)],
                suggestions=["Try again - the server may be busy"],
            )
        # no response was obtained at all
        if isinstance(
            error, httpx.NetworkError | httpx.RemoteProtocolError | httpx.ProxyError
        ):
            return NetworkError(
                self.translate(NETWORK_ERROR_KEY),
                errors=[str(error)],
                suggestions=[
                    "Check your internet connection",
                    "Verify the backend URL is correct",
                ],
            )
        return None
