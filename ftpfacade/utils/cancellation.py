"""Cancellation helpers for ftpfacade.

Transfers accept an optional threading.Event as their cancellation
signal. These helpers poll it at checkpoints and between blocks.
"""

import threading
from typing import BinaryIO, Optional

from ftpfacade.ftp.exceptions import FTPCancelledError


# Block size for copy loops (8KB)
BLOCK_SIZE = 8192


def check_cancelled(cancel: Optional[threading.Event], operation: str) -> None:
    """
    Raise if the cancellation signal is set.

    Args:
        cancel: Cancellation signal, None means never cancelled
        operation: Name used in the error message

    Raises:
        FTPCancelledError: If cancel is set
    """
    if cancel is not None and cancel.is_set():
        raise FTPCancelledError(operation)


def copy_stream(
    source,
    destination: BinaryIO,
    cancel: Optional[threading.Event] = None,
    operation: str = "Copy",
    block_size: int = BLOCK_SIZE
) -> int:
    """
    Copy source into destination block by block.

    Args:
        source: Object with a read(size) method
        destination: Writable binary file
        cancel: Checked before every block
        operation: Name used in the cancellation error
        block_size: Bytes per read

    Returns:
        Number of bytes copied

    Raises:
        FTPCancelledError: If cancel is set during the copy
    """
    copied = 0
    while True:
        check_cancelled(cancel, operation)
        block = source.read(block_size)
        if not block:
            return copied
        destination.write(block)
        copied += len(block)


class CancellableReader:
    """Wraps a reader so every read() first checks a cancellation signal."""

    def __init__(
        self,
        reader,
        cancel: Optional[threading.Event],
        operation: str = "Upload"
    ):
        self._reader = reader
        self._cancel = cancel
        self._operation = operation
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        check_cancelled(self._cancel, self._operation)
        data = self._reader.read(size)
        self.bytes_read += len(data)
        return data
