"""High-value constants for the allocation client package."""

# Package metadata
PACKAGE_VERSION = "1.0.0"
CLIENT_NAME = "allocation-client"
USER_AGENT = f"{CLIENT_NAME}/{PACKAGE_VERSION}"

# Persisted session keys
TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"
REMEMBER_ME_KEY = "remember_me"

# External API contract consts
AUTH_ENDPOINT_MARKERS = (
    "/auth/login",
    "/auth/forgot-password",
    "/auth/reset-password",
    "/auth/change-password",
)
PUBLIC_ENDPOINT_MARKER = "/public/teacher-form-submission/"
JSON_CONTENT_TYPE = "application/json"

# Localized message keys
SESSION_EXPIRED_KEY = "common:errors.sessionExpired"
NETWORK_ERROR_KEY = "common:errors.networkError"
REQUEST_TIMEOUT_KEY = "common:errors.requestTimeout"

# Business logic consts
DEFAULT_ERROR_MESSAGE = "An error occurred"
DEFAULT_TIMEOUT_SECONDS = 30
