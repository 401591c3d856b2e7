"""Request dispatcher — one authenticated HTTP request, one parsed response.

Resolves the session for the target host, pins the API version in the
``Accept`` header, issues exactly one request through ``httpx`` and
parses the XML response with the codec's safe parser.

Nothing here retries.  A mutation sent through ``request`` is not
idempotent from the API's point of view, so the caller decides what to
do after a ``TransportError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from site_pairing.codec import DocumentDecodeError, parse_xml
from site_pairing.core.constants import (
    ACCEPT_TEMPLATE,
    DEFAULT_API_VERSION,
    DEFAULT_REQUEST_TIMEOUT_S,
)
from site_pairing.core.exceptions import TransientError
from site_pairing.utils.helpers import host_of

if TYPE_CHECKING:
    from types import TracebackType

    from lxml.etree import _Element

    from site_pairing.api.session import SessionRegistry
    from site_pairing.core.config import PairingConfig

logger = logging.getLogger(__name__)


class TransportError(TransientError):
    """Network or HTTP-level failure.

    Attributes:
        method: HTTP method of the failed request.
        uri: Target URI.
        status_code: HTTP status, or ``None`` when no response was received.
    """

    default_stage = "dispatch"
    default_code = "TRANSPORT_FAILED"

    def __init__(
        self,
        message: str,
        *,
        method: str = "",
        uri: str = "",
        status_code: int | None = None,
    ) -> None:
        self.method = method
        self.uri = uri
        self.status_code = status_code
        super().__init__(message, site=host_of(uri) if uri else "")


class RequestDispatcher:
    """Issues authenticated requests against site APIs.

    Example usage::

        sessions = SessionRegistry([Session("site-a.example.com", token)])
        with RequestDispatcher(sessions, api_version="31.0") as dispatcher:
            root = dispatcher.request("GET", "https://site-a.example.com/api/site/associations")
    """

    def __init__(
        self,
        sessions: SessionRegistry,
        *,
        api_version: str = DEFAULT_API_VERSION,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        verify_tls: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self._sessions = sessions
        self._api_version = api_version
        self._timeout_s = timeout_s
        self._owns_client = client is None
        self._client = client or httpx.Client(verify=verify_tls, timeout=timeout_s)

    @classmethod
    def from_config(
        cls,
        config: PairingConfig,
        sessions: SessionRegistry,
        *,
        client: httpx.Client | None = None,
    ) -> RequestDispatcher:
        return cls(
            sessions,
            api_version=config.api_version,
            timeout_s=config.request_timeout_s,
            verify_tls=config.verify_tls,
            client=client,
        )

    def request(
        self,
        method: str,
        uri: str,
        *,
        body: bytes | None = None,
        content_type: str | None = None,
        timeout_s: float | None = None,
    ) -> _Element | None:
        """Issue one request and return the parsed response root.

        Args:
            method: HTTP method.
            uri: Absolute target URI.
            body: Optional request body.
            content_type: ``Content-Type`` for *body*.
            timeout_s: Per-call timeout override in seconds.

        Returns:
            The parsed XML root element, or ``None`` for an empty body.

        Raises:
            AuthenticationMissing: No session for the target host.
            TransportError: Network failure or non-2xx status.
            DocumentDecodeError: The response body is not well-formed XML.
        """
        session = self._sessions.resolve(uri)
        headers = {
            "Accept": ACCEPT_TEMPLATE.format(version=self._api_version),
            **session.auth_headers(),
        }
        if body is not None and content_type:
            headers["Content-Type"] = content_type

        logger.debug("dispatch | method=%s | uri=%s | body_bytes=%d", method, uri, len(body or b""))

        try:
            response = self._client.request(
                method,
                uri,
                content=body,
                headers=headers,
                timeout=self._timeout_s if timeout_s is None else timeout_s,
            )
        except httpx.HTTPError as exc:
            msg = f"{method} {uri} failed: {exc}"
            raise TransportError(msg, method=method, uri=uri) from exc

        if not response.is_success:
            detail = _error_detail(response.content)
            msg = f"{method} {uri} returned HTTP {response.status_code}"
            if detail:
                msg = f"{msg}: {detail}"
            raise TransportError(msg, method=method, uri=uri, status_code=response.status_code)

        logger.debug(
            "dispatch completed | method=%s | uri=%s | status=%d | bytes=%d",
            method,
            uri,
            response.status_code,
            len(response.content),
        )

        if not response.content.strip():
            return None
        return parse_xml(response.content)

    def get(self, uri: str) -> _Element | None:
        return self.request("GET", uri)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> RequestDispatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _error_detail(content: bytes) -> str:
    """Pull the ``message`` attribute out of an API ``<Error>`` body, if any."""
    if not content.strip():
        return ""
    try:
        root = parse_xml(content)
    except DocumentDecodeError:
        return ""
    return root.get("message", "")
