"""Exception types raised by the OCI machine driver."""

from typing import Optional

import oci
import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

DRIVER_NAME = "oci"


class MachineError(RuntimeError):
    """Base class for every driver failure surfaced to the host."""


class ConfigurationError(MachineError):
    """Configuration is missing or cannot be resolved. Never retried."""


class RequiredOptionError(ConfigurationError):
    """A required option was not supplied."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f'{DRIVER_NAME} driver requires the "{flag}" option.')


class ResourceNotFoundError(ConfigurationError):
    """No resource matched the requested display name."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Can't find {kind} with name {name}")


class AuthenticationError(MachineError):
    """OCI credentials could not be loaded or validated."""


class ProviderError(MachineError):
    """An OCI request was rejected or failed in transport."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.status: Optional[int] = getattr(cause, "status", None)
        message = getattr(cause, "message", None) or str(cause)
        super().__init__(f"Failed to {operation}: {message}")


class ConvergenceTimeoutError(MachineError):
    """Polling budget exhausted before the instance reached its target state."""

    def __init__(self, target: str, last_state: Optional[str], attempts: int):
        self.target = target
        self.last_state = last_state
        self.attempts = attempts
        super().__init__(
            f"Instance did not reach desired state {target} after {attempts} attempts "
            f"(last observed state: {last_state or 'unknown'}); "
            f"instance state is indeterminate"
        )


class AddressUnresolvedError(MachineError):
    """The instance has no public address yet."""


class InvalidStateError(MachineError):
    """The operation is not valid for the instance's current state."""


class RemoteCommandError(MachineError):
    """A command run over SSH exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command {command!r} failed with exit code {returncode}: {output.strip()}")


def is_transient(exc: BaseException) -> bool:
    """Return True for failures worth repeating on a read-only request."""
    cause = exc.__cause__ if isinstance(exc, ProviderError) and exc.__cause__ else exc

    if isinstance(cause, oci.exceptions.ServiceError):
        return cause.status == 429 or cause.status >= 500
    return isinstance(
        cause, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
    )


retry_transient = retry(
    retry=retry_if_exception(is_transient),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
