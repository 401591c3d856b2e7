"""Tests for RequestDispatcher and the session registry.

HTTP is served by ``httpx.MockTransport`` so headers, bodies and status
handling are exercised through the real client.
"""

from __future__ import annotations

import unittest
from unittest.mock import patch

import httpx

from site_pairing.api.dispatcher import RequestDispatcher, TransportError
from site_pairing.api.session import AuthenticationMissing, Session, SessionRegistry
from site_pairing.codec import DocumentDecodeError
from site_pairing.core.config import PairingConfig
from tests.fakes import NS

_URL = "https://site-a.example.com/api/site/associations"


def _dispatcher(
    handler: object,
    sessions: SessionRegistry | None = None,
    **kwargs: object,
) -> RequestDispatcher:
    if sessions is None:
        sessions = SessionRegistry([Session("site-a.example.com", "tok-a")])
    client = httpx.Client(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]
    return RequestDispatcher(sessions, client=client, **kwargs)  # type: ignore[arg-type]


class TestRequestHeaders(unittest.TestCase):
    def test_accept_and_auth_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=f'<SiteAssociations xmlns="{NS}"/>'.encode())

        root = _dispatcher(handler, api_version="36.2").request("GET", _URL)

        assert root is not None
        assert seen[0].headers["Accept"] == "application/*+xml;version=36.2"
        assert seen[0].headers["x-vcloud-authorization"] == "tok-a"
        assert "Content-Type" not in seen[0].headers

    def test_bearer_session(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        sessions = SessionRegistry([Session("site-a.example.com", "jwt", bearer=True)])
        _dispatcher(handler, sessions).request("GET", _URL)

        assert seen[0].headers["Authorization"] == "Bearer jwt"
        assert "x-vcloud-authorization" not in seen[0].headers

    def test_body_and_content_type(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202, content=f'<Task xmlns="{NS}" status="queued"/>'.encode())

        _dispatcher(handler).request(
            "POST",
            _URL,
            body=b"<x/>",
            content_type="application/vnd.vmware.admin.siteAssociation+xml",
        )

        assert seen[0].method == "POST"
        assert seen[0].content == b"<x/>"
        assert seen[0].headers["Content-Type"] == "application/vnd.vmware.admin.siteAssociation+xml"

    def test_explicit_zero_timeout_is_kept(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        dispatcher = _dispatcher(handler, timeout_s=30.0)
        dispatcher.request("GET", _URL, timeout_s=0.0)
        dispatcher.request("GET", _URL)

        assert seen[0].extensions["timeout"]["read"] == 0.0
        assert seen[1].extensions["timeout"]["read"] == 30.0


class TestResponseHandling(unittest.TestCase):
    def test_empty_body_returns_none(self) -> None:
        assert _dispatcher(lambda r: httpx.Response(200, content=b"  ")).get(_URL) is None

    def test_non_2xx_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = f'<Error xmlns="{NS}" message="Access is forbidden"/>'.encode()
            return httpx.Response(403, content=body)

        with self.assertRaises(TransportError) as ctx:
            _dispatcher(handler).get(_URL)
        assert ctx.exception.status_code == 403
        assert "Access is forbidden" in ctx.exception.message
        assert ctx.exception.site == "site-a.example.com"

    def test_non_xml_error_body(self) -> None:
        with self.assertRaises(TransportError) as ctx:
            _dispatcher(lambda r: httpx.Response(500, content=b"<html")).get(_URL)
        assert ctx.exception.status_code == 500

    def test_network_failure_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(TransportError) as ctx:
            _dispatcher(handler).get(_URL)
        assert ctx.exception.status_code is None
        assert ctx.exception.retryable is True

    def test_malformed_xml_raises_decode_error(self) -> None:
        with self.assertRaises(DocumentDecodeError):
            _dispatcher(lambda r: httpx.Response(200, content=b"<unclosed>")).get(_URL)

    def test_single_attempt(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        with self.assertRaises(TransportError):
            _dispatcher(handler).request("PUT", _URL, body=b"<x/>", content_type="text/xml")
        assert len(calls) == 1


class TestSessionResolution(unittest.TestCase):
    def test_missing_session_raises_before_request(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        with self.assertRaises(AuthenticationMissing) as ctx:
            _dispatcher(handler).get("https://site-b.example.com/api/site/associations")
        assert ctx.exception.host == "site-b.example.com"
        assert ctx.exception.retryable is False
        assert calls == []

    def test_host_lookup_is_case_insensitive(self) -> None:
        registry = SessionRegistry([Session("Site-A.Example.com", "tok")])
        assert registry.resolve("https://site-a.example.com/api").token == "tok"
        assert registry.get("SITE-A.EXAMPLE.COM") is not None

    def test_empty_registry_resolves_nothing(self) -> None:
        with self.assertRaises(AuthenticationMissing):
            SessionRegistry().resolve(_URL)

    def test_token_not_in_repr(self) -> None:
        assert "secret" not in repr(Session("h", "secret"))


class TestDispatcherConstruction(unittest.TestCase):
    @patch("site_pairing.api.dispatcher.httpx.Client")
    def test_verify_flag_passed_to_transport(self, mock_client_cls: object) -> None:
        config = PairingConfig(insecure_tls=True, request_timeout_s=12.0)
        RequestDispatcher.from_config(config, SessionRegistry())
        mock_client_cls.assert_called_once_with(verify=False, timeout=12.0)  # type: ignore[attr-defined]

    @patch("site_pairing.api.dispatcher.httpx.Client")
    def test_strict_verification_by_default(self, mock_client_cls: object) -> None:
        RequestDispatcher(SessionRegistry())
        assert mock_client_cls.call_args.kwargs["verify"] is True  # type: ignore[attr-defined]

    def test_injected_client_is_not_closed(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(204)))
        with RequestDispatcher(SessionRegistry(), client=client):
            pass
        assert client.is_closed is False
        client.close()
