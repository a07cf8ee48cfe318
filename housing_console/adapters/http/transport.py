"""
Credential transport.

Holds the aiohttp session (its own or a shared one) and the current bearer
token. It has no business logic beyond header management and turning HTTP
outcomes into ``ApiResponse`` values. It never raises for transport or
protocol problems.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp

from ...domain.normalizers import resolve
from ...infra.logging import get_logger
from ...infra.serialization import safe_json_loads

logger = get_logger(__name__)

TRANSPORT_FAILURE_MESSAGE = "Could not connect to the server"
MALFORMED_RESPONSE_MESSAGE = "The server returned a response that could not be read"
NOT_AUTHENTICATED_MESSAGE = "You are not signed in"

_INVALID_JSON = object()


class ErrorKind(str, Enum):
    TRANSPORT = "transport"          # network / remote unreachable
    HTTP = "http"                    # remote answered with a non-2xx status
    PROTOCOL = "protocol"            # remote answered 2xx but the body is unusable
    UNAUTHENTICATED = "unauthenticated"  # not sent: no token


@dataclass(frozen=True)
class ApiResponse:
    data: Any = None
    error: Optional[str] = None
    status: Optional[int] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any, status: Optional[int] = None) -> "ApiResponse":
        return cls(data=data, status=status)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, status: Optional[int] = None) -> "ApiResponse":
        return cls(error=message, status=status, error_kind=kind)


def extract_error_message(body: Any, status: int) -> str:
    message = resolve(
        body,
        ("message", "error", "title", "data.message"),
        blank_is_missing=True,
        accept=lambda v: isinstance(v, str),
    )
    if message:
        return message
    if isinstance(body, str) and body.strip():
        return body.strip()
    return f"Request failed with status {status}"


def open_client_session(connector_limit: int = 10) -> aiohttp.ClientSession:
    """
    A pooled aiohttp session to share between transports.

    Must be called on the loop that will use it. Carries no credentials; each
    transport adds its own Authorization header per request.
    """
    return aiohttp.ClientSession(connector=aiohttp.TCPConnector(limit=connector_limit))


class CredentialTransport:
    """
    Authenticated HTTP access to the housing API.

    The Authorization header is built per request from the current token, so
    once ``clear_token()`` returns no later request can carry the old one.

    Pass ``session`` to borrow a shared aiohttp session; a borrowed session is
    never closed by ``close()``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        connector_limit: int = 10,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.connector_limit = connector_limit
        self.session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._token: Optional[str] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        if self.session is None or self.session.closed:
            self.session = open_client_session(self.connector_limit)
            self._owns_session = True

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
        self.session = None

    # ------------------------------------------------------------------ token

    def set_token(self, token: str) -> None:
        self._token = token or None

    def clear_token(self) -> None:
        self._token = None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # ---------------------------------------------------------------- request

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        authenticated: bool = True,
    ) -> ApiResponse:
        if authenticated and not self._token:
            logger.warning(f"Refusing {method} {path}: no credential token")
            return ApiResponse.failure(ErrorKind.UNAUTHENTICATED, NOT_AUTHENTICATED_MESSAGE, 401)

        await self._ensure_session()
        url = self.url_for(path)
        try:
            async with self.session.request(
                method.upper(),
                url,
                json=json,
                headers=self._headers(authenticated),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{method.upper()} {path} transport failure: {type(e).__name__}: {e}")
            return ApiResponse.failure(ErrorKind.TRANSPORT, TRANSPORT_FAILURE_MESSAGE)

        body = safe_json_loads(text, _INVALID_JSON) if text and text.strip() else None
        logger.debug(f"{method.upper()} {path} -> {status}")

        if not 200 <= status < 300:
            message = extract_error_message(text if body is _INVALID_JSON else body, status)
            logger.warning(f"{method.upper()} {path} failed with {status}: {message}")
            return ApiResponse.failure(ErrorKind.HTTP, message, status)

        if body is _INVALID_JSON:
            logger.error(f"{method.upper()} {path} returned a non-JSON body")
            return ApiResponse.failure(ErrorKind.PROTOCOL, MALFORMED_RESPONSE_MESSAGE, status)

        return ApiResponse.success(body, status)
