"""Validated on-chain address type.

Contract bindings only accept ``Address`` instances, so a placeholder string
or a bare integer can never reach ``w3.eth.contract``.
"""

from typing import Union

from eth_utils import is_address, is_checksum_address, to_checksum_address

from snapswap.errors import InvalidAddress


class Address(str):
    """EIP-55 checksum address.

    Example:
        >>> Address("0x7a250d5630b4cf539739df2c5dacb4c659f2488d")
        '0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D'
    """

    def __new__(cls, value: Union[str, bytes, "Address"]) -> "Address":
        if isinstance(value, Address):
            return value

        if isinstance(value, (bytes, bytearray)):
            if len(value) != 20:
                raise InvalidAddress(f"Address must be 20 bytes, got {len(value)}")
            return super().__new__(cls, to_checksum_address(bytes(value)))

        if not isinstance(value, str):
            # Hex integer literals lose leading zeros and are not addresses.
            raise InvalidAddress(f"Address must be a hex string or 20 bytes, got {type(value).__name__}")

        if not is_address(value):
            raise InvalidAddress(f"Invalid address: {value!r}")

        # Mixed case carries an EIP-55 checksum that must match.
        digits = value[2:] if value[:2] in ("0x", "0X") else value
        if digits != digits.lower() and digits != digits.upper():
            if not is_checksum_address("0x" + digits):
                raise InvalidAddress(f"Bad address checksum: {value!r}")

        return super().__new__(cls, to_checksum_address(value))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return str.lower(self) == other.lower()
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self) -> int:
        return hash(str.lower(self))
