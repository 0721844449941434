from __future__ import annotations


class ConnchkError(Exception):
    pass


class ConfigurationError(ConnchkError, ValueError):
    """Malformed or ambiguous target configuration. Fatal to the whole run."""


class ProbeError(ConnchkError):
    """A failure local to one target. The runner turns it into a Failure result."""

    error_kind = "unexpected"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TcpConnectError(ProbeError):
    error_kind = "connection"


class TransportError(ProbeError):
    error_kind = "transport"


class StatusMismatchError(ProbeError):
    error_kind = "status_mismatch"

    def __init__(self, status_code: int, expected_status: int, body: str = "") -> None:
        message = f"Status: {status_code} (expected {expected_status})"
        if body:
            message = f"{message}, Details: {body}"
        super().__init__(message, status_code=status_code)
        self.expected_status = expected_status
        self.body = body
