"""HTTP transport configuration.

Builds the httpx plumbing for one (ConnectionTarget, Session) pair: base URL,
TLS trust policy, timeouts, standard headers and session headers. A Transport
never changes after construction; a new session means a new Transport.
"""

import logging
import ssl
from typing import Any, Dict, Optional

import certifi
import httpx

from proxmox_mobile import __version__
from proxmox_mobile.client.exceptions import NetworkError
from proxmox_mobile.client.models import ConnectionTarget, Session

logger = logging.getLogger(__name__)

API_PREFIX = "api2/json/"
CLIENT_ID = f"proxmox-mobile/{__version__}"
AUTH_COOKIE = "PVEAuthCookie"
CSRF_HEADER = "CSRFPreventionToken"

# Extra attempts after a failed connect, GET only
CONNECT_RETRIES = 1


def build_base_url(target: ConnectionTarget) -> str:
    """Build the base URL for a target.

    Args:
        target: Connection target

    Returns:
        URL of the form '{scheme}://{host}:{port}/'
    """
    scheme = "https" if target.use_https else "http"
    host = target.host
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{scheme}://{host}:{target.port}/"


def build_ssl_context(verify_tls: bool = True) -> ssl.SSLContext:
    """Build the TLS context for a transport.

    With verify_tls=False the returned context accepts ANY server certificate
    and ANY hostname. That disables transport security and must only be used
    against lab hosts with self-signed certificates.

    Args:
        verify_tls: Verify certificates and hostnames against the CA bundle

    Returns:
        Configured SSL context
    """
    if verify_tls:
        return ssl.create_default_context(cafile=certifi.where())

    logger.warning(
        "TLS verification is DISABLED: any certificate and any hostname will be accepted"
    )
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def build_headers(session: Optional[Session] = None) -> Dict[str, str]:
    """Build the headers sent with every request.

    Args:
        session: Active session, if any

    Returns:
        Header dictionary
    """
    headers = {
        "User-Agent": CLIENT_ID,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if session is not None:
        headers["Cookie"] = f"{AUTH_COOKIE}={session.auth_ticket}"
        if session.anti_forgery_token:
            headers[CSRF_HEADER] = session.anti_forgery_token
    return headers


class Transport:
    """Configured HTTP transport for one target and optional session.

    Attributes:
        target: Connection target
        session: Session whose headers are attached, or None
        base_url: Base URL of the target
        headers: Headers sent with every request
        ssl_context: TLS context used for https connections
        timeout: httpx timeout applied to connect, read, write and pool
    """

    def __init__(self, target: ConnectionTarget, session: Optional[Session] = None):
        """Initialize transport.

        Args:
            target: Connection target
            session: Session to attach, or None for unauthenticated calls
        """
        self.target = target
        self.session = session
        self.base_url = build_base_url(target)
        self.headers = build_headers(session)
        self.ssl_context = build_ssl_context(target.verify_tls)
        self.timeout = httpx.Timeout(target.timeout)

    def build_url(self, endpoint: str) -> str:
        """Build the full URL for an API endpoint.

        Args:
            endpoint: Path below the API prefix (e.g. 'nodes/pve/qemu')

        Returns:
            Full URL
        """
        return f"{self.base_url}{API_PREFIX}{endpoint.lstrip('/')}"

    def create_client(self) -> httpx.AsyncClient:
        """Create the httpx client used for one request."""
        return httpx.AsyncClient(
            verify=self.ssl_context,
            timeout=self.timeout,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request.

        A failed connection attempt is retried once for GET. Other methods
        are never retried so that state-changing calls run at most once.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            params: Query parameters
            json: JSON request body

        Returns:
            The HTTP response, whatever its status code

        Raises:
            NetworkError: For connection, TLS, timeout and protocol failures
        """
        method = method.upper()
        url = self.build_url(endpoint)
        max_attempts = 1 + (CONNECT_RETRIES if method == "GET" else 0)

        logger.debug(f"{method} {url}")
        if params:
            logger.debug(f"Query params: {params}")

        attempt = 0
        while True:
            attempt += 1
            try:
                async with self.create_client() as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=self.headers,
                        params=params,
                        json=json,
                    )
                logger.debug(f"Response status: {response.status_code}")
                return response

            except httpx.ConnectError as e:
                if attempt < max_attempts:
                    logger.debug(f"Connect failed ({e}), retry {attempt}/{CONNECT_RETRIES}")
                    continue
                raise NetworkError(
                    f"Failed to connect to {self.base_url}: {e}",
                    endpoint=endpoint,
                ) from e

            except httpx.TimeoutException as e:
                raise NetworkError(
                    f"Request to {endpoint} timed out: {e}",
                    endpoint=endpoint,
                ) from e

            except httpx.TransportError as e:
                raise NetworkError(
                    f"Transport error for {endpoint}: {e}",
                    endpoint=endpoint,
                ) from e
