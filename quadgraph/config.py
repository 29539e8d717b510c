import os
from dataclasses import dataclass

DEFAULT_ADDRESS = "127.0.0.1:8080"
DEFAULT_TIMEOUT = 30.0

ADDRESS_ENV = "DGRAPH_ADDR"
TIMEOUT_ENV = "DGRAPH_TIMEOUT"


def get_timeout() -> float:
    raw = os.getenv(TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"Invalid {TIMEOUT_ENV} '{raw}'. Must be a number of seconds")
    if timeout <= 0:
        raise ValueError(f"Invalid {TIMEOUT_ENV} '{raw}'. Must be positive")
    return timeout


@dataclass
class ClientConfig:
    address: str = DEFAULT_ADDRESS
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load settings from DGRAPH_ADDR and DGRAPH_TIMEOUT."""
        address = os.getenv(ADDRESS_ENV, "").strip() or DEFAULT_ADDRESS
        return cls(address=address, timeout=get_timeout())


def base_url(address: str) -> str:
    """Turn "host:port" into an http URL; plain http, no TLS."""
    address = address.strip().rstrip("/")
    if not address:
        raise ValueError("Server address is empty")
    if "://" not in address:
        address = f"http://{address}"
    return address
