"""Protocol transport for ftpfacade.

Defines the small capability set the client needs from an FTP session
(ServerConnection) and its implementation on top of ftplib. Wire framing,
data channels and MLSD fact parsing are all left to ftplib.
"""

import ftplib
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import BinaryIO, Iterator, List, Optional

from ftpfacade.ftp.exceptions import (
    FTPAuthenticationError,
    FTPCancelledError,
    FTPConnectionError,
    FTPProtocolError,
)
from ftpfacade.utils.paths import join_remote

logger = logging.getLogger("ftpfacade.transport")


class EntryType(Enum):
    """Type of a remote directory entry."""
    FILE = "file"
    FOLDER = "folder"
    LINK = "link"
    OTHER = "other"


@dataclass(frozen=True)
class DirectoryEntry:
    """A single entry returned by a directory listing."""
    name: str
    type: EntryType
    size: int = 0
    modified: Optional[datetime] = None

    @property
    def is_file(self) -> bool:
        return self.type == EntryType.FILE

    @property
    def is_folder(self) -> bool:
        return self.type == EntryType.FOLDER


class ServerConnection(ABC):
    """An open FTP control connection able to issue sequential commands."""

    @abstractmethod
    def login(self, username: str, password: str) -> None:
        """Authenticate the session."""

    @abstractmethod
    def quit(self) -> None:
        """Log out and close the connection."""

    @abstractmethod
    def retrieve(self, path: str) -> BinaryIO:
        """Open a read stream on a remote file."""

    @abstractmethod
    def store(self, path: str, reader: BinaryIO) -> None:
        """Write the content of reader to a remote file."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a remote file."""

    @abstractmethod
    def file_size(self, path: str) -> int:
        """Return the size in bytes of a remote file."""

    @abstractmethod
    def list(self, path: str) -> List[DirectoryEntry]:
        """List the entries of a remote directory."""

    @abstractmethod
    def make_dir(self, path: str) -> None:
        """Create a remote directory."""

    @abstractmethod
    def remove_dir(self, path: str) -> None:
        """Remove an empty remote directory."""

    @abstractmethod
    def remove_dir_recursive(self, path: str) -> None:
        """Remove a remote directory and everything below it."""

    @abstractmethod
    def rename(self, source: str, destination: str) -> None:
        """Rename or move a remote path."""


# MLSD "type" facts
_MLSD_TYPES = {
    "file": EntryType.FILE,
    "dir": EntryType.FOLDER,
    "cdir": EntryType.FOLDER,
    "pdir": EntryType.FOLDER,
    "os.unix=slink": EntryType.LINK,
    "os.unix=symlink": EntryType.LINK,
}

# Replies meaning the server does not implement a command
_UNSUPPORTED_REPLIES = ("500", "501", "502", "504")

# Listing lines are decoded with the session encoding
_LISTING_ERRORS = ftplib.all_errors + (UnicodeDecodeError,)


def _parse_mlsd_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S")
    except ValueError:
        return None


def entry_from_mlsd(name: str, facts: dict) -> DirectoryEntry:
    """Build a DirectoryEntry from an MLSD (name, facts) pair."""
    entry_type = _MLSD_TYPES.get(facts.get("type", "").lower(), EntryType.OTHER)
    try:
        size = int(facts.get("size", 0))
    except ValueError:
        size = 0
    return DirectoryEntry(
        name=name,
        type=entry_type,
        size=size,
        modified=_parse_mlsd_time(facts.get("modify")),
    )


def entry_from_list_line(line: str) -> Optional[DirectoryEntry]:
    """
    Build a DirectoryEntry from one line of LIST output.

    Understands the Unix ``ls -l`` layout and the MS-DOS layout used by
    IIS. Returns None for lines that match neither (e.g. "total 12").
    """
    parts = line.split(None, 8)
    if len(parts) == 9 and len(parts[0]) >= 10:
        kind = parts[0][0]
        name = parts[8]
        if kind == "d":
            entry_type = EntryType.FOLDER
        elif kind == "-":
            entry_type = EntryType.FILE
        elif kind == "l":
            entry_type = EntryType.LINK
            name = name.split(" -> ", 1)[0]
        else:
            entry_type = EntryType.OTHER
        try:
            size = int(parts[4])
        except ValueError:
            size = 0
        return DirectoryEntry(name=name, type=entry_type, size=size)

    parts = line.split(None, 3)
    if len(parts) == 4 and parts[0][:2].isdigit():
        if parts[2].upper() == "<DIR>":
            return DirectoryEntry(name=parts[3], type=EntryType.FOLDER)
        try:
            return DirectoryEntry(name=parts[3], type=EntryType.FILE, size=int(parts[2]))
        except ValueError:
            return None

    return None


@contextmanager
def _command(path: str, operation: str) -> Iterator[None]:
    """Translate ftplib failures into FTPProtocolError."""
    try:
        yield
    except ftplib.all_errors as e:
        raise FTPProtocolError(path, operation, e)


class RetrieveStream:
    """
    Read side of a RETR data connection.

    Closing the stream closes the data socket and consumes the final
    reply on the control connection so the session stays usable.
    """

    def __init__(self, ftp: ftplib.FTP, sock, path: str):
        self._ftp = ftp
        self._sock = sock
        self._path = path
        self._eof = False
        self._closed = False

    def read(self, size: int = 8192) -> bytes:
        with _command(self._path, "download"):
            data = self._sock.recv(size)
        if not data:
            self._eof = True
        return data

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()

        if self._eof:
            with _command(self._path, "download"):
                self._ftp.voidresp()
            return

        # Aborted transfer: the server answers 426 (or 226), either is fine.
        try:
            self._ftp.voidresp()
        except ftplib.all_errors as e:
            logger.debug(f"Reply after aborted download of {self._path}: {e}")

    def __enter__(self) -> "RetrieveStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class FTPLibConnection(ServerConnection):
    """ServerConnection backed by an ftplib.FTP instance."""

    # Block size for data transfers (8KB)
    BLOCK_SIZE = 8192

    def __init__(self, ftp: ftplib.FTP):
        self._ftp = ftp

    @property
    def ftp(self) -> ftplib.FTP:
        """The underlying ftplib object."""
        return self._ftp

    def login(self, username: str, password: str) -> None:
        try:
            self._ftp.login(user=username, passwd=password)
        except ftplib.error_perm as e:
            raise FTPAuthenticationError(username, e)
        except ftplib.all_errors as e:
            raise FTPConnectionError(self._ftp.host, self._ftp.port, e)

    def quit(self) -> None:
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            # Best effort close
            self._ftp.close()

    def retrieve(self, path: str) -> RetrieveStream:
        with _command(path, "download"):
            self._ftp.voidcmd("TYPE I")
            sock = self._ftp.transfercmd(f"RETR {path}")
        return RetrieveStream(self._ftp, sock, path)

    def store(self, path: str, reader: BinaryIO) -> None:
        try:
            with _command(path, "upload"):
                self._ftp.storbinary(f"STOR {path}", reader, blocksize=self.BLOCK_SIZE)
        except FTPCancelledError:
            # Data socket is already closed; drain the transfer reply.
            try:
                self._ftp.voidresp()
            except ftplib.all_errors as e:
                logger.debug(f"Reply after cancelled upload to {path}: {e}")
            raise

    def delete(self, path: str) -> None:
        with _command(path, "delete"):
            self._ftp.delete(path)

    def file_size(self, path: str) -> int:
        with _command(path, "get size of"):
            self._ftp.voidcmd("TYPE I")
            size = self._ftp.size(path)
        if size is None:
            raise FTPProtocolError(path, "get size of")
        return size

    def list(self, path: str) -> List[DirectoryEntry]:
        try:
            return [
                entry_from_mlsd(name, facts)
                for name, facts in self._ftp.mlsd(path, facts=["type", "size", "modify"])
            ]
        except ftplib.error_perm as e:
            if not str(e).startswith(_UNSUPPORTED_REPLIES):
                raise FTPProtocolError(path, "list", e)
            logger.debug(f"MLSD not supported, falling back to LIST: {e}")
        except _LISTING_ERRORS as e:
            raise FTPProtocolError(path, "list", e)

        lines: List[str] = []
        try:
            self._ftp.retrlines(f"LIST {path}", lines.append)
        except _LISTING_ERRORS as e:
            raise FTPProtocolError(path, "list", e)

        entries = []
        for line in lines:
            entry = entry_from_list_line(line)
            if entry is not None:
                entries.append(entry)
        return entries

    def make_dir(self, path: str) -> None:
        with _command(path, "create directory"):
            self._ftp.mkd(path)

    def remove_dir(self, path: str) -> None:
        with _command(path, "remove directory"):
            self._ftp.rmd(path)

    def remove_dir_recursive(self, path: str) -> None:
        for entry in self.list(path):
            if entry.name in (".", ".."):
                continue
            child = join_remote(path, entry.name)
            if entry.is_folder:
                self.remove_dir_recursive(child)
            else:
                self.delete(child)
        self.remove_dir(path)

    def rename(self, source: str, destination: str) -> None:
        with _command(source, "rename"):
            self._ftp.rename(source, destination)
