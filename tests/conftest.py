"""Pytest configuration and shared fixtures for ftpfacade tests."""

import io
from typing import Callable, Dict, List, Optional

import pytest

from ftpfacade.config.settings import FTPClientConfig
from ftpfacade.ftp.client import FTPClient
from ftpfacade.ftp.dialer import Dialer
from ftpfacade.ftp.exceptions import FTPProtocolError
from ftpfacade.ftp.transport import DirectoryEntry, ServerConnection


# Test constants
TEST_FTP_ADDRESS = "127.0.0.1:2121"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


class FakeFTPServer:
    """In-memory remote filesystem shared by all fake connections."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.dirs = {"/"}
        self.listings: Dict[str, List[DirectoryEntry]] = {}
        self.calls: List[tuple] = []
        # Operation name -> exception raised when it is called
        self.failures: Dict[str, Exception] = {}
        # Optional wrapper applied to retrieve() streams
        self.stream_factory: Optional[Callable[[bytes], object]] = None

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


class FakeConnection(ServerConnection):
    """ServerConnection recording every call against a FakeFTPServer."""

    def __init__(self, server: FakeFTPServer):
        self.server = server
        self.logged_in = False
        self.quit_count = 0

    @property
    def closed(self) -> bool:
        return self.quit_count > 0

    def _call(self, name: str, *args) -> None:
        self.server.calls.append((name, *args))
        error = self.server.failures.get(name)
        if error is not None:
            raise error

    def login(self, username, password):
        self._call("login", username)
        self.logged_in = True

    def quit(self):
        self.server.calls.append(("quit",))
        self.quit_count += 1

    def retrieve(self, path):
        self._call("retrieve", path)
        if path not in self.server.files:
            raise FTPProtocolError(path, "download")
        data = self.server.files[path]
        if self.server.stream_factory is not None:
            return self.server.stream_factory(data)
        return io.BytesIO(data)

    def store(self, path, reader):
        self._call("store", path)
        chunks = []
        while True:
            chunk = reader.read(4)
            if not chunk:
                break
            chunks.append(chunk)
        self.server.files[path] = b"".join(chunks)

    def delete(self, path):
        self._call("delete", path)
        if path not in self.server.files:
            raise FTPProtocolError(path, "delete")
        del self.server.files[path]

    def file_size(self, path):
        self._call("file_size", path)
        if path not in self.server.files:
            raise FTPProtocolError(path, "get size of")
        return len(self.server.files[path])

    def list(self, path):
        self._call("list", path)
        if path not in self.server.listings:
            raise FTPProtocolError(path, "list")
        return list(self.server.listings[path])

    def make_dir(self, path):
        self._call("make_dir", path)
        if path in self.server.dirs:
            raise FTPProtocolError(path, "create directory")
        self.server.dirs.add(path)

    def remove_dir(self, path):
        self._call("remove_dir", path)
        self.server.dirs.discard(path)

    def remove_dir_recursive(self, path):
        self._call("remove_dir_recursive", path)
        self.server.dirs.discard(path)

    def rename(self, source, destination):
        self._call("rename", source, destination)
        if source not in self.server.files:
            raise FTPProtocolError(source, "rename")
        self.server.files[destination] = self.server.files.pop(source)


class FakeDialer(Dialer):
    """Dialer handing out FakeConnections and recording every dial."""

    def __init__(self, server: FakeFTPServer):
        self.server = server
        self.connections: List[FakeConnection] = []
        self.timeouts: List[Optional[float]] = []
        self.dial_error: Optional[Exception] = None

    @property
    def dial_count(self) -> int:
        return len(self.timeouts)

    @property
    def open_connections(self) -> List[FakeConnection]:
        return [c for c in self.connections if not c.closed]

    def dial(self, address):
        return self._connect(None)

    def dial_timeout(self, address, timeout):
        return self._connect(timeout)

    def _connect(self, timeout):
        self.timeouts.append(timeout)
        if self.dial_error is not None:
            raise self.dial_error
        connection = FakeConnection(self.server)
        self.connections.append(connection)
        return connection


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_server() -> FakeFTPServer:
    """Provide an empty in-memory FTP server."""
    return FakeFTPServer()


@pytest.fixture
def fake_dialer(fake_server) -> FakeDialer:
    """Provide a dialer connected to the fake server."""
    return FakeDialer(fake_server)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_config() -> Callable[..., FTPClientConfig]:
    """Factory for test client configurations."""
    def factory(**overrides) -> FTPClientConfig:
        values = dict(
            address=TEST_FTP_ADDRESS,
            username=TEST_FTP_USER,
            password=TEST_FTP_PASS,
        )
        values.update(overrides)
        return FTPClientConfig(**values)
    return factory


@pytest.fixture
def make_client(make_config, fake_dialer, clock) -> Callable[..., FTPClient]:
    """Factory for clients wired to the fake dialer and clock."""
    def factory(**overrides) -> FTPClient:
        return FTPClient(make_config(**overrides), dialer=fake_dialer, clock=clock)
    return factory
