"""Response envelope decoding and error classification.

Every API response is wrapped as {"data": ...}. This module turns a raw
httpx response into the declared payload type, or into a classified
ProxmoxError. It is shared by the authenticator and every typed operation.
"""

import logging
import types
from functools import lru_cache
from typing import Any, Optional, Union, get_args, get_origin

import httpx
from pydantic import TypeAdapter, ValidationError

from proxmox_mobile.client.exceptions import (
    ForbiddenError,
    InvalidCredentialsError,
    MalformedResponseError,
    NotFoundError,
    ProxmoxError,
    ServerError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

_COLLECTION_ORIGINS = (list, tuple, set, frozenset)


def extract_server_message(response: httpx.Response) -> Optional[str]:
    """Extract the server's error text from a response.

    The API reports parameter errors as {"errors": {field: text}} and puts
    other failure reasons in the HTTP reason phrase.

    Args:
        response: HTTP response

    Returns:
        Error message, or None if the server gave nothing useful
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, dict) and errors:
            return "; ".join(f"{key}: {value}" for key, value in errors.items())
        if body.get("message"):
            return str(body["message"]).strip()

    return response.reason_phrase or None


def error_for_status(
    status_code: int,
    endpoint: str,
    server_message: Optional[str] = None,
) -> ProxmoxError:
    """Map a non-2xx status code to a classified error.

    Args:
        status_code: HTTP status code
        endpoint: API endpoint path
        server_message: Message returned by the server

    Returns:
        The error instance (not raised)
    """
    detail = f": {server_message}" if server_message else ""

    if status_code == 401:
        return InvalidCredentialsError(
            f"Authentication failed for {endpoint}{detail}\n"
            "Check the username, password and realm, or log in again.",
            status_code=status_code,
            endpoint=endpoint,
            server_message=server_message,
        )

    if status_code == 403:
        return ForbiddenError(
            f"Access forbidden for {endpoint}{detail}\n"
            "Check the user's permissions.",
            status_code=status_code,
            endpoint=endpoint,
            server_message=server_message,
        )

    if status_code == 404:
        return NotFoundError(
            f"Resource not found: {endpoint}{detail}",
            status_code=status_code,
            endpoint=endpoint,
            server_message=server_message,
        )

    if status_code == 500:
        return ServerError(
            f"Server error for {endpoint}{detail}",
            status_code=status_code,
            endpoint=endpoint,
            server_message=server_message,
        )

    return UnexpectedStatusError(
        f"Unexpected response ({status_code}) for {endpoint}{detail}",
        status_code=status_code,
        endpoint=endpoint,
        server_message=server_message,
    )


def classify_status(response: httpx.Response, endpoint: str) -> None:
    """Raise the classified error for a non-2xx response.

    Args:
        response: HTTP response
        endpoint: API endpoint path

    Raises:
        ProxmoxError: Subclass matching the status code
    """
    if 200 <= response.status_code < 300:
        return

    server_message = extract_server_message(response)
    logger.debug(f"{endpoint} failed with {response.status_code}: {server_message}")
    raise error_for_status(response.status_code, endpoint, server_message)


def is_collection_type(payload_type: Any) -> bool:
    """Whether a declared payload type is a collection (list, tuple, set)."""
    origin = get_origin(payload_type) or payload_type
    return origin in _COLLECTION_ORIGINS


def accepts_none(payload_type: Any) -> bool:
    """Whether a declared payload type admits null."""
    if payload_type is Any or payload_type is None or payload_type is type(None):
        return True
    origin = get_origin(payload_type)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(payload_type)
    return False


@lru_cache(maxsize=None)
def _adapter(payload_type: Any) -> TypeAdapter:
    return TypeAdapter(payload_type)


def _field_path(error: ValidationError) -> Optional[str]:
    errors = error.errors()
    if not errors:
        return None
    loc = errors[0].get("loc", ())
    return ".".join(str(part) for part in ("data", *loc))


def decode_envelope(response: httpx.Response, payload_type: Any, endpoint: str) -> Any:
    """Decode {"data": ...} into the declared payload type.

    A null or missing 'data' becomes an empty list for collection types and
    None for optional types; for any other type it is an error.

    Args:
        response: Successful HTTP response
        payload_type: Declared type of 'data' (e.g. List[Node])
        endpoint: API endpoint path

    Returns:
        Validated payload

    Raises:
        MalformedResponseError: If the body is not an envelope or does not
            match the declared type
    """
    try:
        body = response.json()
    except ValueError as e:
        raise MalformedResponseError(
            f"Response from {endpoint} is not valid JSON: {e}",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from e

    if not isinstance(body, dict):
        raise MalformedResponseError(
            f"Response from {endpoint} is not a JSON object",
            status_code=response.status_code,
            endpoint=endpoint,
        )

    data = body.get("data")
    if data is None:
        if is_collection_type(payload_type):
            return []
        if accepts_none(payload_type):
            return None
        raise MalformedResponseError(
            f"Response from {endpoint} has no 'data'",
            field_path="data",
            status_code=response.status_code,
            endpoint=endpoint,
        )

    try:
        return _adapter(payload_type).validate_python(data)
    except ValidationError as e:
        field_path = _field_path(e)
        raise MalformedResponseError(
            f"Unexpected response shape from {endpoint} at {field_path}",
            field_path=field_path,
            status_code=response.status_code,
            endpoint=endpoint,
        ) from e
