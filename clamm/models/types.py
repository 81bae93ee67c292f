"""Shared type definitions for pool models.

Fixed-width integers are plain Python ints with pydantic bounds attached, so
snapshots reject values that could not exist in the pool's state.
"""

from typing import Annotated

from pydantic import Field

# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-f0-9]{40}$")]

Uint128 = Annotated[int, Field(ge=0, le=2**128 - 1)]
Uint160 = Annotated[int, Field(ge=0, le=2**160 - 1)]
Uint256 = Annotated[int, Field(ge=0, le=2**256 - 1)]
Int24 = Annotated[int, Field(ge=-(2**23), le=2**23 - 1)]
Int128 = Annotated[int, Field(ge=-(2**127), le=2**127 - 1)]


def normalize_address(address: str) -> str:
    """Normalize an address to lowercase with a 0x prefix."""
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr
