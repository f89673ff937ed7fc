"""Tests for transport configuration."""

import ssl
from unittest.mock import patch

import httpx
import pytest
from pytest_httpx import HTTPXMock

from proxmox_mobile import __version__
from proxmox_mobile.client.exceptions import NetworkError
from proxmox_mobile.client.models import ConnectionTarget
from proxmox_mobile.client.transport import (
    Transport,
    build_base_url,
    build_headers,
    build_ssl_context,
)

from conftest import BASE_URL, MOCK_CSRF, MOCK_TICKET


class TestBaseUrl:
    """Tests for base URL construction."""

    def test_https_default(self, target):
        assert build_base_url(target) == "https://pve.example.com:8006/"

    def test_http_and_custom_port(self):
        target = ConnectionTarget(host="10.0.0.5", port=8443, use_https=False)
        assert build_base_url(target) == "http://10.0.0.5:8443/"

    def test_ipv6_host_is_bracketed(self):
        target = ConnectionTarget(host="fd00::10")
        assert build_base_url(target) == "https://[fd00::10]:8006/"

    def test_endpoint_url(self, target):
        transport = Transport(target)
        assert transport.build_url("nodes/pve/qemu") == f"{BASE_URL}/nodes/pve/qemu"
        assert transport.build_url("/nodes") == f"{BASE_URL}/nodes"


class TestHeaders:
    """Tests for standard and session headers."""

    def test_headers_without_session(self):
        headers = build_headers()

        assert headers["User-Agent"] == f"proxmox-mobile/{__version__}"
        assert headers["Accept"] == "application/json"
        assert headers["Content-Type"] == "application/json"
        assert "Cookie" not in headers
        assert "CSRFPreventionToken" not in headers

    def test_headers_with_session(self, session):
        headers = build_headers(session)

        assert headers["Cookie"] == f"PVEAuthCookie={MOCK_TICKET}"
        assert headers["CSRFPreventionToken"] == MOCK_CSRF

    def test_session_without_csrf_token(self, session):
        headers = build_headers(session.model_copy(update={"anti_forgery_token": None}))

        assert headers["Cookie"] == f"PVEAuthCookie={MOCK_TICKET}"
        assert "CSRFPreventionToken" not in headers


class TestTlsPolicy:
    """Tests for the TLS trust policy."""

    def test_verification_enabled_by_default(self, target):
        transport = Transport(target)

        assert target.verify_tls is True
        assert transport.ssl_context.check_hostname is True
        assert transport.ssl_context.verify_mode == ssl.CERT_REQUIRED

    def test_insecure_context_accepts_anything(self):
        context = build_ssl_context(verify_tls=False)

        assert context.check_hostname is False
        assert context.verify_mode == ssl.CERT_NONE

    def test_insecure_target_gets_permissive_context(self):
        transport = Transport(ConnectionTarget(host="pve.example.com", verify_tls=False))

        assert transport.ssl_context.check_hostname is False
        assert transport.ssl_context.verify_mode == ssl.CERT_NONE

    def test_client_uses_transport_context(self):
        transport = Transport(ConnectionTarget(host="pve.example.com", verify_tls=False))

        with patch("proxmox_mobile.client.transport.httpx.AsyncClient") as client_cls:
            transport.create_client()

        client_cls.assert_called_once_with(verify=transport.ssl_context, timeout=transport.timeout)

    def test_insecure_mode_logs_warning(self, caplog):
        with caplog.at_level("WARNING", logger="proxmox_mobile.client.transport"):
            build_ssl_context(verify_tls=False)

        assert "TLS verification is DISABLED" in caplog.text

    def test_timeout_applies_to_all_phases(self):
        transport = Transport(ConnectionTarget(host="pve.example.com", timeout=5))

        assert transport.timeout.connect == 5
        assert transport.timeout.read == 5
        assert transport.timeout.write == 5


class TestRequest:
    """Tests for sending requests and retry behavior."""

    async def test_session_headers_are_sent(self, httpx_mock: HTTPXMock, target, session):
        httpx_mock.add_response(url=f"{BASE_URL}/nodes", json={"data": []})

        response = await Transport(target, session).request("GET", "nodes")

        assert response.status_code == 200
        request = httpx_mock.get_requests()[0]
        assert request.headers["Cookie"] == f"PVEAuthCookie={MOCK_TICKET}"
        assert request.headers["CSRFPreventionToken"] == MOCK_CSRF
        assert request.headers["User-Agent"].startswith("proxmox-mobile/")

    async def test_non_2xx_is_returned_not_raised(self, httpx_mock: HTTPXMock, target):
        httpx_mock.add_response(url=f"{BASE_URL}/nodes", status_code=500)

        response = await Transport(target).request("GET", "nodes")

        assert response.status_code == 500

    async def test_get_retried_once_on_connect_error(self, httpx_mock: HTTPXMock, target):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        httpx_mock.add_response(url=f"{BASE_URL}/version", json={"data": {"version": "8.3.0"}})

        response = await Transport(target).request("GET", "version")

        assert response.status_code == 200
        assert len(httpx_mock.get_requests()) == 2

    async def test_get_gives_up_after_one_retry(self, httpx_mock: HTTPXMock, target):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(NetworkError) as exc_info:
            await Transport(target).request("GET", "version")

        assert exc_info.value.endpoint == "version"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert len(httpx_mock.get_requests()) == 2

    async def test_post_is_never_retried(self, httpx_mock: HTTPXMock, target, session):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(NetworkError):
            await Transport(target, session).request("POST", "nodes/pve/qemu/100/status/stop")

        assert len(httpx_mock.get_requests()) == 1

    async def test_timeout_becomes_network_error(self, httpx_mock: HTTPXMock, target):
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        with pytest.raises(NetworkError, match="timed out"):
            await Transport(target).request("GET", "version")

        assert len(httpx_mock.get_requests()) == 1
