"""Client configuration for ftpfacade.

Provides the FTPClientConfig dataclass, validated on construction.
"""

from dataclasses import asdict, dataclass, field

from ftpfacade.utils.validators import (
    split_address,
    validate_address,
    validate_timeout,
    validate_ttl,
)


@dataclass(frozen=True)
class FTPClientConfig:
    """FTP client configuration, fixed for the lifetime of a client."""
    address: str
    username: str = "anonymous"
    password: str = field(default="", repr=False)
    timeout: float = 30
    persistent: bool = False
    ttl: float = 60
    passive_mode: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        for is_valid, error in (
            validate_address(self.address),
            validate_timeout(self.timeout),
            validate_ttl(self.ttl),
        ):
            if not is_valid:
                raise ValueError(error)

    @property
    def host(self) -> str:
        return split_address(self.address)[0]

    @property
    def port(self) -> int:
        return split_address(self.address)[1]

    def to_dict(self) -> dict:
        """Convert to a dictionary, without the password."""
        data = asdict(self)
        del data["password"]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FTPClientConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)
