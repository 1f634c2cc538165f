"""Host wallet session: snap discovery and entropy retrieval."""

from snapswap.session.connector import (
    HostProvider,
    HostRequestError,
    JsonRpcHostProvider,
    SnapConnector,
    is_local_snap,
)

__all__ = [
    "HostProvider",
    "HostRequestError",
    "JsonRpcHostProvider",
    "SnapConnector",
    "is_local_snap",
]
