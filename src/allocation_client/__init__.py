"""Allocation Client Package

Async HTTP client for the allocation system REST backend, with session
handling, per-request timeouts and normalized errors.
"""

from .auth import TokenGuard, decode_claims, is_token_expired
from .cancellation import AbortController, AbortSignal, RequestAborted
from .client import ApiClient, get_client
from .config import Config, get_config, setup_logging
from .consts import PACKAGE_VERSION
from .endpoints import EndpointKind, classify_endpoint
from .exceptions import (
    AllocationClientError,
    ApiError,
    ConfigError,
    NetworkError,
    RequestTimeoutError,
    SessionExpiredError,
)
from .messages import get_translator
from .models import MultipartForm, RequestOptions
from .storage import FileStorage, MemoryStorage, SessionStore

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "get_translator",
    "setup_logging",
    "Config",
    "ApiClient",
    "TokenGuard",
    "decode_claims",
    "is_token_expired",
    "EndpointKind",
    "classify_endpoint",
    "AbortController",
    "AbortSignal",
    "RequestAborted",
    "RequestOptions",
    "MultipartForm",
    "MemoryStorage",
    "FileStorage",
    "SessionStore",
    "AllocationClientError",
    "ApiError",
    "ConfigError",
    "NetworkError",
    "RequestTimeoutError",
    "SessionExpiredError",
]
