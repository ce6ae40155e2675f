"""FTP session management for ftpfacade.

Provides ConnectionState and FTPSessionManager, which decides whether an
operation gets a fresh session or the cached persistent one, expires the
cached session after its time-to-live, and makes sure ephemeral sessions
are closed on every exit path.
"""

import logging
import threading
import time
from contextlib import contextmanager, nullcontext
from datetime import datetime
from enum import Enum
from typing import Callable, Iterator, Optional

from ftpfacade.config.settings import FTPClientConfig
from ftpfacade.ftp.dialer import Dialer, FTPLibDialer
from ftpfacade.ftp.exceptions import FTPError
from ftpfacade.ftp.transport import ServerConnection

logger = logging.getLogger("ftpfacade.connection")


class ConnectionState(Enum):
    """State of the cached persistent session."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class FTPSessionManager:
    """
    Hands out logged-in sessions according to the persistence mode.

    Non-persistent: every acquire() dials and logs in, every release()
    quits. Persistent: one session is cached and reused until ttl seconds
    have passed since it was opened, then replaced on the next acquire().
    """

    def __init__(
        self,
        config: FTPClientConfig,
        dialer: Optional[Dialer] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the session manager.

        Args:
            config: Connection configuration
            dialer: Opens connections, defaults to an ftplib dialer
            clock: Monotonic time source in seconds
        """
        self._config = config
        self._dialer = dialer or FTPLibDialer(passive_mode=config.passive_mode)
        self._clock = clock
        self._lock = threading.RLock()

        self._session: Optional[ServerConnection] = None
        self._expires_at: Optional[float] = None
        self._state = ConnectionState.DISCONNECTED
        self._connected_at: Optional[datetime] = None
        self._error_message: Optional[str] = None

    @property
    def persistent(self) -> bool:
        return self._config.persistent

    @property
    def ttl(self) -> float:
        return self._config.ttl

    @property
    def state(self) -> ConnectionState:
        """Current state of the cached session."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if a persistent session is cached."""
        return self._session is not None

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when the cached session was opened."""
        return self._connected_at

    @property
    def expires_at(self) -> Optional[float]:
        """Clock value at which the cached session goes stale."""
        return self._expires_at

    @property
    def error_message(self) -> Optional[str]:
        """Last error message if state is ERROR."""
        return self._error_message

    def _open(self) -> ServerConnection:
        """
        Dial and log in.

        Raises:
            FTPAcquisitionError: If dialing or login fails
        """
        config = self._config
        description = f"FTP connect to {config.address} with timeout {config.timeout:g}s"
        logger.debug(f"[Start] {description}")
        started = time.monotonic()

        try:
            if config.timeout > 0:
                session = self._dialer.dial_timeout(config.address, config.timeout)
            else:
                session = self._dialer.dial(config.address)

            try:
                session.login(config.username, config.password)
            except FTPError:
                session.quit()
                raise
        finally:
            logger.debug(f"[End] {description} in {time.monotonic() - started:.3f}s")

        return session

    def _discard(self) -> None:
        """Drop the cached session, logging out of it."""
        stale = self._session
        self._session = None
        self._expires_at = None
        self._connected_at = None
        self._state = ConnectionState.DISCONNECTED

        if stale is not None:
            try:
                stale.quit()
            except FTPError as e:
                logger.debug(f"Error closing stale session: {e}")

    def _refresh(self) -> ServerConnection:
        """Replace the cached session with a fresh one."""
        self._discard()
        try:
            session = self._open()
        except FTPError as e:
            self._state = ConnectionState.ERROR
            self._error_message = str(e)
            raise

        self._session = session
        self._expires_at = self._clock() + self.ttl
        self._state = ConnectionState.CONNECTED
        self._connected_at = datetime.now()
        self._error_message = None
        logger.info(f"Persistent FTP session opened to {self._config.address}")
        return session

    def acquire(self) -> ServerConnection:
        """
        Get a logged-in session.

        Returns:
            A new session (non-persistent) or the cached one (persistent)

        Raises:
            FTPAcquisitionError: If a new session was needed and could not be opened
        """
        if not self.persistent:
            return self._open()

        with self._lock:
            if self._session is None or self._clock() >= self._expires_at:
                return self._refresh()
            return self._session

    def release(self, session: ServerConnection) -> None:
        """Quit a non-persistent session, keep a persistent one."""
        if not self.persistent:
            session.quit()

    @contextmanager
    def session(self) -> Iterator[ServerConnection]:
        """
        Scoped acquire/release.

        In persistent mode the manager lock is held for the whole block,
        so operations sharing the cached session run one at a time.
        """
        with self._lock if self.persistent else nullcontext():
            session = self.acquire()
            try:
                yield session
            finally:
                self.release(session)

    def close(self) -> None:
        """Log out of the cached session, if any."""
        with self._lock:
            self._discard()
