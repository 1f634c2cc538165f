"""Static contract catalog for the target network.

Maps logical names to an address (router and factory only) and a minimal ABI
covering just the methods and events this package touches. Token and pair
addresses vary per call and are supplied when binding.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from snapswap.chains import GOERLI, ChainConfig
from snapswap.contracts.address import Address

logger = logging.getLogger(__name__)


ROUTER_V2_ABI = (
    {
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "name": "getAmountsOut",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactTokensForTokens",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
)

FACTORY_ABI = (
    {
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
        ],
        "name": "getPair",
        "outputs": [{"name": "pair", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
)

PAIR_ABI = (
    {
        "anonymous": False,
        "inputs": [
            {"indexed": False, "name": "reserve0", "type": "uint112"},
            {"indexed": False, "name": "reserve1", "type": "uint112"},
        ],
        "name": "Sync",
        "type": "event",
    },
)

ERC20_ABI = (
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "success", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
)


@dataclass(frozen=True)
class ContractSpec:
    """Address (if fixed) and ABI of one logical contract."""

    name: str
    abi: tuple
    address: Optional[Address] = None

    @property
    def has_address(self) -> bool:
        return self.address is not None


class ContractRegistry:
    """Read-only contract catalog for one network.

    Usage:
        registry = default_registry()
        router = registry.bind(w3, "router")
        token = registry.bind(w3, "erc20", Address(token_address))
    """

    def __init__(self, chain: ChainConfig, specs: Mapping[str, ContractSpec]):
        self.chain = chain
        self._specs = MappingProxyType(dict(specs))

    @property
    def names(self) -> list[str]:
        return sorted(self._specs)

    def get(self, name: str) -> ContractSpec:
        """Get contract spec by logical name.

        Raises:
            KeyError: If the name is not registered
        """
        try:
            return self._specs[name]
        except KeyError:
            raise KeyError(f"Unknown contract '{name}'. Known: {', '.join(self.names)}") from None

    def address_of(self, name: str) -> Address:
        """Get the fixed network address of a contract."""
        spec = self.get(name)
        if spec.address is None:
            raise ValueError(f"Contract '{name}' has no fixed address; supply one per call")
        return spec.address

    def bind(self, w3, name: str, address: Optional[Address] = None):
        """Build a web3 contract binding.

        Args:
            w3: Web3 instance the binding talks through
            name: Logical contract name
            address: Per-call address, required for contracts without a fixed one

        Returns:
            web3 Contract instance

        Raises:
            TypeError: If address is not an Address instance
            ValueError: If address is missing or conflicts with a fixed address
        """
        spec = self.get(name)

        if address is not None and not isinstance(address, Address):
            raise TypeError(
                f"Contract address for '{name}' must be an Address, got {type(address).__name__}"
            )

        if spec.address is not None:
            if address is not None and address != spec.address:
                raise ValueError(f"Contract '{name}' is fixed at {spec.address}")
            target = spec.address
        else:
            if address is None:
                raise ValueError(f"Contract '{name}' requires an address")
            target = address

        logger.debug(f"Binding {name} at {target}")
        return w3.eth.contract(address=str(target), abi=list(spec.abi))


def build_registry(chain: ChainConfig) -> ContractRegistry:
    """Build the Uniswap V2 registry for a chain."""
    return ContractRegistry(
        chain,
        {
            "router": ContractSpec("router", ROUTER_V2_ABI, Address(chain.router_address)),
            "factory": ContractSpec("factory", FACTORY_ABI, Address(chain.factory_address)),
            "pair": ContractSpec("pair", PAIR_ABI),
            "erc20": ContractSpec("erc20", ERC20_ABI),
        },
    )


_default_registry: Optional[ContractRegistry] = None


def default_registry() -> ContractRegistry:
    """Get the registry for the target network."""
    global _default_registry
    if _default_registry is None:
        _default_registry = build_registry(GOERLI)
    return _default_registry
