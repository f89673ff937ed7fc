"""Session authentication.

Exchanges credentials for a ticket and anti-forgery token at the
access/ticket endpoint. Failures come back as Err values, never raised.
"""

import logging
from typing import Callable, Optional

from proxmox_mobile.client.envelope import classify_status, decode_envelope
from proxmox_mobile.client.exceptions import (
    InvalidInputError,
    InvalidResponseError,
    ProxmoxError,
)
from proxmox_mobile.client.models import (
    ConnectionTarget,
    Credentials,
    LoginData,
    LoginRequest,
    Session,
)
from proxmox_mobile.client.result import Err, Ok, Result
from proxmox_mobile.client.transport import Transport

logger = logging.getLogger(__name__)

TICKET_ENDPOINT = "access/ticket"


def validate_login_input(target: ConnectionTarget, credentials: Credentials) -> None:
    """Check login preconditions locally.

    Raises:
        InvalidInputError: If host, username or password is empty
    """
    if not target.host.strip():
        raise InvalidInputError("Host cannot be empty", endpoint=TICKET_ENDPOINT)
    if not credentials.username.strip():
        raise InvalidInputError("Username cannot be empty", endpoint=TICKET_ENDPOINT)
    if credentials.password is None or not credentials.password.strip():
        raise InvalidInputError("Password cannot be empty", endpoint=TICKET_ENDPOINT)


class SessionAuthenticator:
    """Performs the login handshake.

    Attributes:
        transport_factory: Builds the unauthenticated transport for a target
    """

    def __init__(
        self,
        transport_factory: Optional[Callable[[ConnectionTarget], Transport]] = None,
    ):
        self.transport_factory = transport_factory or Transport

    async def authenticate(
        self,
        target: ConnectionTarget,
        credentials: Credentials,
    ) -> Result[Session]:
        """Authenticate against the ticket endpoint.

        Args:
            target: Connection target
            credentials: Username, password and realm

        Returns:
            Ok(Session) on success, Err(ProxmoxError) otherwise:
            InvalidInputError before any request for empty host, username
            or password; InvalidResponseError for a blank ticket; the
            status classification for non-2xx; NetworkError for transport
            failures.
        """
        try:
            validate_login_input(target, credentials)

            logger.debug(
                f"Authenticating {credentials.username}@{credentials.realm} "
                f"against {target.host}:{target.port}"
            )
            transport = self.transport_factory(target)
            body = LoginRequest(
                username=credentials.username,
                password=credentials.password,
                realm=credentials.realm,
            )
            response = await transport.request("POST", TICKET_ENDPOINT, json=body.to_payload())

            classify_status(response, TICKET_ENDPOINT)
            login = decode_envelope(response, LoginData, TICKET_ENDPOINT)

            if not login.ticket.strip():
                raise InvalidResponseError(
                    "Received empty authentication ticket",
                    status_code=response.status_code,
                    endpoint=TICKET_ENDPOINT,
                )

            session = Session(
                auth_ticket=login.ticket,
                anti_forgery_token=login.csrf_token,
                username=login.username,
            )
            logger.info(f"Login successful for user: {session.username}")
            return Ok(session)

        except ProxmoxError as e:
            logger.info(f"Authentication failed ({e.kind.value}): {e.message}")
            return Err(e)


async def authenticate(target: ConnectionTarget, credentials: Credentials) -> Result[Session]:
    """Exchange credentials for a Session.

    Convenience wrapper around SessionAuthenticator.authenticate().
    """
    return await SessionAuthenticator().authenticate(target, credentials)
