"""Contract addresses and ABIs for the target network."""

from snapswap.contracts.address import Address
from snapswap.contracts.registry import (
    ContractRegistry,
    ContractSpec,
    build_registry,
    default_registry,
)

__all__ = [
    "Address",
    "ContractRegistry",
    "ContractSpec",
    "build_registry",
    "default_registry",
]
