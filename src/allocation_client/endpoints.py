"""Endpoint classification.

Paths are partitioned into three mutually exclusive kinds. The tests are
plain substring checks with no knowledge of HTTP verbs; the auth check runs
first, then the public check, and everything else is protected.
"""

from enum import StrEnum

from .consts import AUTH_ENDPOINT_MARKERS, PUBLIC_ENDPOINT_MARKER


class EndpointKind(StrEnum):
    AUTH = "auth"
    PUBLIC = "public"
    PROTECTED = "protected"


def is_auth_endpoint(endpoint: str) -> bool:
    """Login and password flows. A 401 here means bad credentials."""
    return any(marker in endpoint for marker in AUTH_ENDPOINT_MARKERS)


def is_public_endpoint(endpoint: str) -> bool:
    """The anonymous form-submission surface. Never sent a token."""
    return PUBLIC_ENDPOINT_MARKER in endpoint


def classify_endpoint(endpoint: str) -> EndpointKind:
    if is_auth_endpoint(endpoint):
        return EndpointKind.AUTH
    if is_public_endpoint(endpoint):
        return EndpointKind.PUBLIC
    return EndpointKind.PROTECTED
