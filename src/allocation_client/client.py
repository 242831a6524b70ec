"""Allocation backend client — every REST call goes through here."""

import asyncio
import json
import logging
from collections.abc import Callable
from functools import cache
from typing import Any

import httpx
from pydantic import BaseModel

from .auth import TokenGuard
from .cancellation import TIMEOUT_REASON, AbortController, run_with_signal
from .config import Config, get_config
from .consts import JSON_CONTENT_TYPE, USER_AGENT
from .endpoints import is_public_endpoint
from .errors import ErrorNormalizer, parse_response
from .messages import get_translator
from .models import MultipartForm, RequestDescriptor, RequestOptions
from .protocols import KeyValueStorage, Translator
from .storage import FileStorage, SessionStore

logger = logging.getLogger("allocation-client.client")

Options = RequestOptions | dict[str, Any] | None


class ApiClient:
    """REST client with session handling and normalized errors.

    Responsibilities:
    - Provide verb methods (get, post, put, patch, delete, get_blob)
    - Attach JSON and bearer headers, enforce the per-request timeout
    - Route failures through ErrorNormalizer and successes through parse_response
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: KeyValueStorage | None = None,
        translate: Translator | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize ApiClient.

        Args:
            config: Config instance. If None, uses get_config().
            storage: Session storage. If None, a FileStorage at config.storage_file.
            translate: Message lookup. If None, the catalog for config.language.
            http_client: HTTP client. If None, creates (and later closes) one.
        """
        self.config = config or get_config()
        self.session = SessionStore(
            storage if storage is not None else FileStorage(self.config.storage_file)
        )
        self.translate = translate or get_translator(self.config.language)

        self._owns_http_client = http_client is None
        # deadlines come from the abort timer, not from httpx
        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=None,
            follow_redirects=True,
        )

        self.on_unauthorized: Callable[[], None] | None = None
        self.token_guard = TokenGuard(
            self.session, self.translate, self._notify_unauthorized
        )
        self.error_normalizer = ErrorNormalizer(
            self.session, self.translate, self._notify_unauthorized
        )

        logger.info(f"API client created for {self.config.base_url}")

    def set_unauthorized_handler(self, handler: Callable[[], None]) -> None:
        """Register the session teardown callback. Replaces any previous one."""
        self.on_unauthorized = handler

    def _notify_unauthorized(self) -> None:
        if self.on_unauthorized is not None:
            self.on_unauthorized()

    async def get(self, endpoint: str, options: Options = None) -> Any:
        return await self._execute(self._describe(endpoint, "GET", None, options))

    async def post(self, endpoint: str, data: Any = None, options: Options = None) -> Any:
        return await self._execute(self._describe(endpoint, "POST", data, options))

    async def put(self, endpoint: str, data: Any = None, options: Options = None) -> Any:
        return await self._execute(self._describe(endpoint, "PUT", data, options))

    async def patch(
        self, endpoint: str, data: Any = None, options: Options = None
    ) -> Any:
        return await self._execute(self._describe(endpoint, "PATCH", data, options))

    async def delete(self, endpoint: str, options: Options = None) -> Any:
        return await self._execute(self._describe(endpoint, "DELETE", None, options))

    async def get_blob(self, endpoint: str, options: Options = None) -> bytes:
        """GET a file download and return the raw bytes unparsed."""
        descriptor = self._describe(
            endpoint, "GET", None, options, omit_json_content_type=True
        )
        return await self._execute(descriptor, decode=lambda response: response.content)

    def _describe(
        self,
        endpoint: str,
        method: str,
        body: Any,
        options: Options,
        omit_json_content_type: bool = False,
    ) -> RequestDescriptor:
        return RequestDescriptor(
            endpoint=endpoint,
            method=method,
            body=body,
            options=options if options is not None else RequestOptions(),
            omit_json_content_type=omit_json_content_type,
        )

    def build_headers(self, descriptor: RequestDescriptor) -> dict[str, str]:
        """Caller headers plus JSON content type and bearer token where due."""
        headers = dict(descriptor.options.headers)

        omit_json = descriptor.omit_json_content_type or descriptor.has_raw_body
        if not omit_json and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = JSON_CONTENT_TYPE

        token = self.session.token
        if token and not is_public_endpoint(descriptor.endpoint):
            headers["Authorization"] = f"Bearer {token}"

        return headers

    def build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        """Assemble the httpx.Request, serializing the body as needed.

        Raises:
            TypeError: If a structured body is not JSON serializable.
        """
        kwargs: dict[str, Any] = {}
        if descriptor.sends_body:
            body = descriptor.body
            if isinstance(body, MultipartForm):
                kwargs["data"] = body.fields
                kwargs["files"] = body.files
            elif isinstance(body, bytes | bytearray | memoryview):
                kwargs["content"] = bytes(body)
            elif hasattr(body, "read"):
                kwargs["content"] = body.read()
            elif isinstance(body, BaseModel):
                kwargs["content"] = body.model_dump_json()
            else:
                kwargs["content"] = json.dumps(body)

        return self.http_client.build_request(
            descriptor.method,
            self.config.build_url(descriptor.endpoint),
            headers=self.build_headers(descriptor),
            params=descriptor.options.params,
            **kwargs,
        )

    async def _execute(
        self,
        descriptor: RequestDescriptor,
        decode: Callable[[httpx.Response], Any] = parse_response,
    ) -> Any:
        """Validate, send and decode one request.

        Raises:
            SessionExpiredError: Expired token before sending, or bare 401.
            RequestTimeoutError: Timer or caller signal aborted the request.
            NetworkError: The backend could not be reached.
            ApiError: Any other non-2xx response.
        """
        self.token_guard.validate_for_request(descriptor.endpoint)
        request = self.build_request(descriptor)

        controller = AbortController()
        timeout = descriptor.options.timeout or self.config.timeout_seconds
        timer = asyncio.get_running_loop().call_later(
            timeout, controller.abort, TIMEOUT_REASON
        )
        signal = descriptor.options.signal or controller.signal

        logger.debug(f"{descriptor.method} {request.url}")
        try:
            response = await run_with_signal(self.http_client.send(request), signal)
            if not response.is_success:
                self.error_normalizer.raise_for_response(response, descriptor.endpoint)
            logger.debug(f"{descriptor.method} {request.url} successful")
            return decode(response)
        except Exception as e:
            normalized = self.error_normalizer.from_transport_error(e)
            if normalized is None or normalized is e:
                raise
            raise normalized from e
        finally:
            timer.cancel()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


@cache
def get_client() -> ApiClient:
    """Get a cached ApiClient instance with default configuration.

    Raises:
        No exceptions raised directly.
        May propagate exceptions from Config() initialization via get_config().
    """
    return ApiClient()
