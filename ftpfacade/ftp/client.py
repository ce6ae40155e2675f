"""FTP client facade for ftpfacade.

FTPClient exposes file transfer, directory management and listing
operations. Every operation takes a session from the session manager,
issues one protocol call and hands the session back, whatever the
outcome.
"""

import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Union

from ftpfacade.config.settings import FTPClientConfig
from ftpfacade.ftp.connection import FTPSessionManager
from ftpfacade.ftp.dialer import Dialer
from ftpfacade.ftp.exceptions import FTPAcquisitionError, FTPError, FTPProtocolError
from ftpfacade.ftp.listing import filter_entries, filter_folders
from ftpfacade.ftp.transport import DirectoryEntry, ServerConnection
from ftpfacade.utils.cancellation import CancellableReader, check_cancelled, copy_stream
from ftpfacade.utils.paths import parent_folder
from ftpfacade.utils.validators import validate_remote_path

logger = logging.getLogger("ftpfacade.client")

LocalPath = Union[str, Path]


@contextmanager
def _timed(description: str) -> Iterator[None]:
    """Log the start and duration of an operation."""
    logger.debug(f"[Start] {description}")
    started = time.monotonic()
    try:
        yield
    finally:
        logger.debug(f"[End] {description} in {time.monotonic() - started:.3f}s")


def _check_path(path: str) -> None:
    is_valid, error = validate_remote_path(path)
    if not is_valid:
        raise ValueError(error)


class FTPClient:
    """
    FTP operations on top of a session manager.

    Usage:
        config = FTPClientConfig(address="ftp.example.com:21", username="user",
                                 password="secret", persistent=True, ttl=300)
        with FTPClient(config) as client:
            client.upload("report.csv", "/reports/2024/report.csv")
            for entry in client.list("/reports/2024", ["csv"]):
                print(entry.name, entry.size)
    """

    def __init__(
        self,
        config: FTPClientConfig,
        dialer: Optional[Dialer] = None,
        connect: bool = True,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the client.

        A persistent client tries to open its session right away. A
        failure there is only logged: the client stays usable and the
        first operation dials again.

        Args:
            config: Connection configuration
            dialer: Opens connections, defaults to an ftplib dialer
            connect: Open the persistent session during construction
            clock: Monotonic time source used for session expiry
        """
        self._config = config
        self._sessions = FTPSessionManager(config, dialer=dialer, clock=clock)

        if config.persistent and connect:
            try:
                self._sessions.acquire()
            except FTPAcquisitionError as e:
                logger.error(f"FTP persistent connection failed: {e}")

    @property
    def config(self) -> FTPClientConfig:
        return self._config

    @property
    def sessions(self) -> FTPSessionManager:
        """The underlying session manager."""
        return self._sessions

    def close(self) -> None:
        """Close the cached persistent session, if any."""
        self._sessions.close()

    def __enter__(self) -> "FTPClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Transfers

    def download(
        self,
        source: str,
        destination: LocalPath,
        cancel: Optional[threading.Event] = None
    ) -> int:
        """
        Download a remote file to a local path.

        The cancellation signal is checked before connecting, before
        opening the remote file, before creating the local file and
        between copied blocks.

        Args:
            source: Remote file path
            destination: Local file path, created or truncated
            cancel: Optional cancellation signal

        Returns:
            Number of bytes written

        Raises:
            FTPCancelledError: If cancel was set
            FTPAcquisitionError: If no session could be opened
            FTPProtocolError: If the server refused the transfer
            OSError: If the local file cannot be written
        """
        _check_path(source)
        with _timed(f"FTP download from {source} to {destination}"):
            check_cancelled(cancel, "Download")

            with self._sessions.session() as conn:
                check_cancelled(cancel, "Download")

                logger.debug(f"Downloading {source}")
                with conn.retrieve(source) as stream:
                    check_cancelled(cancel, "Download")

                    logger.debug(f"Creating {destination}")
                    with open(destination, "wb") as f:
                        check_cancelled(cancel, "Download")

                        logger.debug(f"Copying downloaded content to {destination}")
                        copied = copy_stream(stream, f, cancel, "Download")

            logger.debug(f"Copied {copied // 1024}kb")
            return copied

    @contextmanager
    def download_reader(self, source: str) -> Iterator[BinaryIO]:
        """
        Open a remote file for reading without a local copy.

        The session is held for the whole with block. In persistent mode
        other operations on this client wait until the block exits.

        Usage:
            with client.download_reader("/reports/today.csv") as stream:
                data = stream.read()

        Raises:
            FTPAcquisitionError: If no session could be opened
            FTPProtocolError: If the server refused the transfer
        """
        _check_path(source)
        with _timed(f"FTP download reader of {source}"):
            with self._sessions.session() as conn:
                logger.debug(f"Downloading {source}")
                with conn.retrieve(source) as stream:
                    yield stream

    def upload(
        self,
        source: LocalPath,
        destination: str,
        cancel: Optional[threading.Event] = None
    ) -> int:
        """
        Upload a local file.

        Returns:
            Number of bytes sent

        Raises:
            OSError: If the local file cannot be opened
        """
        logger.debug(f"Opening {source}")
        with open(source, "rb") as f:
            return self.upload_reader(f, destination, cancel)

    def upload_reader(
        self,
        reader: BinaryIO,
        destination: str,
        cancel: Optional[threading.Event] = None
    ) -> int:
        """
        Upload the content of a binary reader.

        The reader is wrapped so that setting cancel interrupts the
        transfer at the next block.

        Args:
            reader: Object with a read(size) method
            destination: Remote file path
            cancel: Optional cancellation signal

        Returns:
            Number of bytes sent

        Raises:
            FTPCancelledError: If cancel was set
            FTPAcquisitionError: If no session could be opened
            FTPProtocolError: If the server refused the transfer
        """
        _check_path(destination)
        with _timed(f"FTP upload to {destination}"):
            check_cancelled(cancel, "Upload")

            with self._sessions.session() as conn:
                check_cancelled(cancel, "Upload")

                logger.debug(f"Uploading to {destination}")
                wrapped = CancellableReader(reader, cancel, "Upload")
                conn.store(destination, wrapped)
                return wrapped.bytes_read

    def create_file(self, path: str, reader: BinaryIO) -> None:
        """Store the content of reader at path. An empty path does nothing."""
        if not path:
            return

        with self._sessions.session() as conn:
            conn.store(path, reader)

    # File operations

    def remove(self, path: str) -> None:
        """Delete a remote file."""
        _check_path(path)
        with _timed(f"FTP remove of {path}"):
            with self._sessions.session() as conn:
                logger.debug(f"Removing {path}")
                conn.delete(path)

    def file_size(self, path: str) -> int:
        """Size of a remote file in bytes."""
        _check_path(path)
        with _timed(f"FTP file size of {path}"):
            with self._sessions.session() as conn:
                return conn.file_size(path)

    def exists(self, path: str) -> bool:
        """
        Check whether a remote file exists.

        A refused size query means the file does not exist. Failing to
        get a session is still an error. An empty path never exists.

        Raises:
            FTPAcquisitionError: If no session could be opened
        """
        if not path:
            return False

        _check_path(path)
        with _timed(f"FTP file exists of {path}"):
            with self._sessions.session() as conn:
                return self._path_exists(conn, path)

    def rename(self, source: str, destination: str) -> None:
        """
        Rename or move a remote path.

        Missing folders above the destination are created first.
        """
        _check_path(source)
        _check_path(destination)
        with _timed(f"FTP rename of {source} to {destination}"):
            with self._sessions.session() as conn:
                self._ensure_folders(conn, parent_folder(destination))
                conn.rename(source, destination)

    # Directory operations

    def create_dir(self, path: str) -> None:
        _check_path(path)
        with self._sessions.session() as conn:
            conn.make_dir(path)

    def ensure_dir(self, path: str) -> None:
        """Create a remote folder along with any missing parents."""
        _check_path(path)
        with self._sessions.session() as conn:
            self._ensure_folders(conn, path)

    def remove_dir(self, path: str) -> None:
        _check_path(path)
        with self._sessions.session() as conn:
            conn.remove_dir(path)

    def remove_dir_recursive(self, path: str) -> None:
        _check_path(path)
        with self._sessions.session() as conn:
            conn.remove_dir_recursive(path)

    # Listing

    def list(
        self,
        folder: str,
        allowed_extensions: Iterable[str] = (),
        pattern: str = ""
    ) -> List[DirectoryEntry]:
        """
        List the files and folders of a remote folder.

        Best effort: if the listing fails the error is logged and an
        empty list is returned.

        Args:
            folder: Remote folder
            allowed_extensions: Case-insensitive extensions to keep
            pattern: Regular expression the names must match

        Returns:
            Matching entries in server order
        """
        with _timed(f"FTP file list of {folder}"):
            return filter_entries(self._list_raw(folder), allowed_extensions, pattern)

    def list_folders(self, folder: str) -> List[DirectoryEntry]:
        """List the sub-folders of a remote folder, best effort like list()."""
        with _timed(f"FTP list folder of {folder}"):
            return filter_folders(self._list_raw(folder))

    # Internals

    def _list_raw(self, folder: str) -> List[DirectoryEntry]:
        try:
            with self._sessions.session() as conn:
                return conn.list(folder)
        except FTPProtocolError as e:
            logger.error(f"[FTP] error listing {folder}: {e}")
            if self._sessions.persistent:
                # A listing can fail with its data transfer half-read.
                self._sessions.close()
            return []
        except FTPError as e:
            logger.error(f"[FTP] error listing {folder}: {e}")
            return []

    def _path_exists(self, conn: ServerConnection, path: str) -> bool:
        try:
            conn.file_size(path)
        except FTPProtocolError:
            return False
        return True

    def _ensure_folders(self, conn: ServerConnection, folder: str) -> None:
        """Create folder and its missing parents, shallowest first."""
        if not folder:
            return

        if self._path_exists(conn, folder):
            return

        self._ensure_folders(conn, parent_folder(folder))

        try:
            conn.make_dir(folder)
        except FTPProtocolError as e:
            logger.warning(f"Could not create {folder}: {e}")
