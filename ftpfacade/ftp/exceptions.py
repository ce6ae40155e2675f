"""FTP-specific exceptions for ftpfacade.

Custom exception hierarchy separating session acquisition failures
(dial, login) from failures of individual protocol calls, so callers can
tell "could not reach the server" apart from "the server refused this".
"""


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPAcquisitionError(FTPError):
    """Could not obtain a usable session (dial or login failed)."""


class FTPConnectionError(FTPAcquisitionError):
    """Failed to establish FTP connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPAuthenticationError(FTPAcquisitionError):
    """FTP authentication (login) failed."""

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        message = f"Authentication failed for user '{username}'"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPAcquisitionError):
    """FTP connection timed out."""

    def __init__(self, operation: str = "Operation", timeout: float = 30):
        self.timeout = timeout
        message = f"{operation} timed out after {timeout:g} seconds"
        super().__init__(message)


class FTPProtocolError(FTPError):
    """An FTP command on an open session failed (RETR, STOR, SIZE, ...)."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        message = f"Failed to {operation} '{path}'"
        super().__init__(message, original_error)


class FTPCancelledError(FTPError):
    """Operation aborted because its cancellation signal was set."""

    def __init__(self, operation: str = "Operation"):
        self.operation = operation
        message = f"{operation} cancelled"
        super().__init__(message)
