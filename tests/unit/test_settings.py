"""Unit tests for client configuration."""

import pytest

from ftpfacade.config.settings import FTPClientConfig


class TestFTPClientConfig:
    """Tests for FTPClientConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = FTPClientConfig(address="192.168.1.100")
        assert config.host == "192.168.1.100"
        assert config.port == 21
        assert config.username == "anonymous"
        assert config.password == ""
        assert config.timeout == 30
        assert config.persistent is False
        assert config.ttl == 60
        assert config.passive_mode is True

    def test_address_with_port(self):
        config = FTPClientConfig(address="ftp.example.com:2121")
        assert config.host == "ftp.example.com"
        assert config.port == 2121

    @pytest.mark.parametrize("address, host, port", [
        ("::1", "::1", 21),
        ("fe80::1", "fe80::1", 21),
        ("[::1]:21", "::1", 21),
    ])
    def test_ipv6_address(self, address, host, port):
        config = FTPClientConfig(address=address)
        assert (config.host, config.port) == (host, port)

    def test_is_immutable(self):
        config = FTPClientConfig(address="192.168.1.100")
        with pytest.raises(AttributeError):
            config.persistent = True

    def test_password_not_in_repr(self):
        config = FTPClientConfig(address="192.168.1.100", password="hunter2")
        assert "hunter2" not in repr(config)

    def test_empty_address_raises_error(self):
        with pytest.raises(ValueError, match="Address is required"):
            FTPClientConfig(address="")

    def test_invalid_port_raises_error(self):
        with pytest.raises(ValueError, match="Port must be between"):
            FTPClientConfig(address="192.168.1.1:0")
        with pytest.raises(ValueError, match="Port must be a number"):
            FTPClientConfig(address="192.168.1.1:ftp")

    def test_invalid_host_raises_error(self):
        with pytest.raises(ValueError, match="Invalid host"):
            FTPClientConfig(address="bad host!:21")

    def test_negative_timeout_raises_error(self):
        with pytest.raises(ValueError, match="Timeout must not be negative"):
            FTPClientConfig(address="192.168.1.1", timeout=-1)

    def test_zero_timeout_allowed(self):
        assert FTPClientConfig(address="192.168.1.1", timeout=0).timeout == 0

    def test_invalid_ttl_raises_error(self):
        with pytest.raises(ValueError, match="TTL must be positive"):
            FTPClientConfig(address="192.168.1.1", ttl=0)

    def test_to_dict_omits_password(self):
        data = FTPClientConfig(address="h.local", password="secret").to_dict()
        assert "password" not in data
        assert data["address"] == "h.local"

    def test_from_dict_ignores_unknown_keys(self):
        config = FTPClientConfig.from_dict({
            "address": "test.local:2121",
            "persistent": True,
            "unknown_field": "should be ignored",
        })
        assert config.port == 2121
        assert config.persistent is True

