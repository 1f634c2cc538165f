"""Target network definition.

Only one network is supported: the Goerli test network, where the Uniswap V2
router and factory are deployed at their canonical addresses.
"""

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a blockchain."""

    name: str
    chain_id: int
    rpc_url: str
    coin_type: int  # BIP44 coin type (SLIP-44)

    router_address: str = ""
    factory_address: str = ""
    tokens: dict[str, str] = field(default_factory=dict)


GOERLI = ChainConfig(
    name="Goerli",
    chain_id=5,
    rpc_url=os.getenv("GOERLI_RPC_URL", "https://ethereum-goerli.publicnode.com"),
    coin_type=60,
    router_address="0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D",
    factory_address="0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
    tokens={
        "WETH": "0xb4fbf271143f4fbf7b91a5ded31805e42b2208d6",
        "LINK": "0x63bfb2118771bd0da7a6936667a7bb705a06c1ba",
    },
)
