"""Address decoding.

An address is split into three fields, high bits first:

    | tag | set index (s bits) | block offset (b bits) |

set_index = (address >> b) & ((1 << s) - 1)
tag = address >> (s + b)

The tag is never masked, so it keeps every remaining high-order bit.
"""
from dataclasses import dataclass
from typing import Tuple


def decode_address(address: int, set_bits: int, block_bits: int) -> Tuple[int, int]:
    """Return (set_index, tag) for `address`."""
    set_index = (address >> block_bits) & ((1 << set_bits) - 1)
    tag = address >> (set_bits + block_bits)
    return set_index, tag


@dataclass(frozen=True)
class AddressDecoder:
    """Bit widths bound once so the cache can decode without passing them around."""

    set_bits: int
    block_bits: int

    def decode(self, address: int) -> Tuple[int, int]:
        return decode_address(address, self.set_bits, self.block_bits)
