"""Dialers for ftpfacade.

A Dialer opens a raw (not yet logged in) ServerConnection to an address.
The session manager only talks to this interface, so tests can swap in
a dialer that hands out fake connections.
"""

import ftplib
import socket
from abc import ABC, abstractmethod

from ftpfacade.ftp.exceptions import FTPConnectionError, FTPTimeoutError
from ftpfacade.ftp.transport import FTPLibConnection, ServerConnection
from ftpfacade.utils.validators import split_address


class Dialer(ABC):
    """Opens connections to an FTP server."""

    @abstractmethod
    def dial(self, address: str) -> ServerConnection:
        """Connect to address without a timeout."""

    @abstractmethod
    def dial_timeout(self, address: str, timeout: float) -> ServerConnection:
        """Connect to address, giving up after timeout seconds."""


class FTPLibDialer(Dialer):
    """Dialer producing ftplib-backed connections."""

    def __init__(self, passive_mode: bool = True, encoding: str = "utf-8"):
        """
        Initialize the dialer.

        Args:
            passive_mode: Use PASV data connections
            encoding: Encoding of the control connection
        """
        self.passive_mode = passive_mode
        self.encoding = encoding

    def dial(self, address: str) -> ServerConnection:
        return self._connect(address, None)

    def dial_timeout(self, address: str, timeout: float) -> ServerConnection:
        return self._connect(address, timeout)

    def _connect(self, address: str, timeout) -> ServerConnection:
        """
        Establish the control connection.

        Raises:
            FTPTimeoutError: If the server does not answer in time
            FTPConnectionError: If the connection fails
        """
        host, port = split_address(address)
        ftp = ftplib.FTP(encoding=self.encoding)
        ftp.set_debuglevel(0)

        try:
            if timeout is None:
                ftp.connect(host=host, port=port)
            else:
                ftp.connect(host=host, port=port, timeout=timeout)
        except socket.timeout as e:
            ftp.close()
            if timeout is None:
                raise FTPConnectionError(host, port, e)
            raise FTPTimeoutError("Connection", timeout)
        except ftplib.all_errors as e:
            ftp.close()
            raise FTPConnectionError(host, port, e)

        ftp.set_pasv(self.passive_mode)
        return FTPLibConnection(ftp)
