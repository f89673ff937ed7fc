"""Proxmox VE API client package.

This package provides the session-authenticated HTTP client for the Proxmox VE
API, including models, the error taxonomy, and tagged result values.
"""

from proxmox_mobile.client.auth import SessionAuthenticator, authenticate
from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.exceptions import (
    ConfigurationError,
    ErrorKind,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidResponseError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    ProxmoxError,
    ServerError,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from proxmox_mobile.client.models import (
    ConnectionTarget,
    Credentials,
    GuestAction,
    GuestType,
    Session,
    Timeframe,
)
from proxmox_mobile.client.result import Err, Ok, Result, capture

__all__ = [
    "ProxmoxClient",
    "SessionAuthenticator",
    "authenticate",
    "ConnectionTarget",
    "Credentials",
    "Session",
    "GuestAction",
    "GuestType",
    "Timeframe",
    "Ok",
    "Err",
    "Result",
    "capture",
    "ErrorKind",
    "ProxmoxError",
    "ConfigurationError",
    "InvalidInputError",
    "InvalidCredentialsError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "UnexpectedStatusError",
    "NetworkError",
    "MalformedResponseError",
    "InvalidResponseError",
    "UnauthenticatedError",
]
