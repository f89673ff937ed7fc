"""Error taxonomy for the Proxmox API client.

Every failure surfaced by the client is a subclass of ProxmoxError tagged with
an ErrorKind, so callers can branch on the kind or catch a specific class.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of client failures."""

    INVALID_INPUT = "invalid_input"
    INVALID_CREDENTIALS = "invalid_credentials"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNEXPECTED_STATUS = "unexpected_status"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"
    INVALID_RESPONSE = "invalid_response"
    UNAUTHENTICATED = "unauthenticated"


class ProxmoxError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human readable description
        status_code: HTTP status code if a response was received
        endpoint: API path the request was sent to
        server_message: Error text returned by the server, if any
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED_STATUS

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        server_message: Optional[str] = None,
    ):
        """Initialize client error.

        Args:
            message: Error message
            status_code: HTTP status code
            endpoint: API endpoint path
            server_message: Message extracted from the response body
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.server_message = server_message


class InvalidInputError(ProxmoxError):
    """A local precondition failed. No request was sent."""

    kind = ErrorKind.INVALID_INPUT


class InvalidCredentialsError(ProxmoxError):
    """The server rejected the credentials or ticket (401)."""

    kind = ErrorKind.INVALID_CREDENTIALS


class ForbiddenError(ProxmoxError):
    """The authenticated user lacks permission (403)."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(ProxmoxError):
    """The remote node, guest, storage or other resource does not exist (404)."""

    kind = ErrorKind.NOT_FOUND


class ServerError(ProxmoxError):
    """Internal server error (500)."""

    kind = ErrorKind.SERVER_ERROR


class UnexpectedStatusError(ProxmoxError):
    """Any non-2xx status without a dedicated class."""

    kind = ErrorKind.UNEXPECTED_STATUS


class NetworkError(ProxmoxError):
    """Exception raised for transport-level failures.

    This includes:
    - Connection timeouts
    - DNS resolution failures
    - Connection refused
    - SSL/TLS errors
    """

    kind = ErrorKind.NETWORK_ERROR


class MalformedResponseError(ProxmoxError):
    """The response body could not be decoded into the expected type.

    Attributes:
        field_path: Dotted path of the offending field (e.g. 'data.0.vmid')
    """

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(
        self,
        message: str,
        field_path: Optional[str] = None,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(message, status_code=status_code, endpoint=endpoint)
        self.field_path = field_path


class InvalidResponseError(ProxmoxError):
    """The response decoded but violates the protocol (e.g. a blank ticket)."""

    kind = ErrorKind.INVALID_RESPONSE


class UnauthenticatedError(ProxmoxError):
    """An authenticated operation was attempted without a session."""

    kind = ErrorKind.UNAUTHENTICATED


class ConfigurationError(ProxmoxError):
    """Exception raised for configuration-related errors.

    This includes:
    - Missing or invalid configuration files
    - Invalid profile names
    - Configuration validation errors

    Exit code: 3
    """

    kind = ErrorKind.INVALID_INPUT
