"""Tagged result values.

Authentication returns Ok/Err instead of raising so that callers can render
an outcome without try/except. capture() gives the same shape to any typed
API operation.
"""

from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from proxmox_mobile.client.exceptions import ProxmoxError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> ProxmoxError:
        raise ValueError("Called unwrap_err() on an Ok result")


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a classified error."""

    error: ProxmoxError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise self.error

    def unwrap_err(self) -> ProxmoxError:
        return self.error


Result = Union[Ok[T], Err]


async def capture(awaitable: Awaitable[T]) -> "Result[T]":
    """Await an operation and wrap its outcome.

    Only classified client errors become Err; cancellation and programming
    errors propagate unchanged.

    Args:
        awaitable: Coroutine returned by a client operation

    Returns:
        Ok with the payload, or Err with the ProxmoxError
    """
    try:
        return Ok(await awaitable)
    except ProxmoxError as e:
        return Err(e)
