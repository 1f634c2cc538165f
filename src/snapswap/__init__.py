"""snapswap - automated token swaps signed with host wallet entropy."""

__version__ = "0.1.0"
