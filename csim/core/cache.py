"""Core cache implementation

This file provides the set-associative LRU cache model driven by the simulator.
Behavior:
- Cache is composed of 2**s sets; each set holds at most `associativity` blocks.
  set_index = (address >> b) & (2**s - 1)
  tag = address >> (s + b)
- Each set keeps its blocks ordered by recency. A hit moves the block to the
  most-recently-used position; a miss on a full set evicts the
  least-recently-used block before the new one is inserted.
- Access returns an Outcome (HIT, MISS or MISS_EVICTION).
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from csim.core.address import AddressDecoder

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Result of a single cache access."""

    HIT = "hit"
    MISS = "miss"
    MISS_EVICTION = "miss eviction"

    @property
    def is_hit(self) -> bool:
        return self is Outcome.HIT

    @property
    def is_miss(self) -> bool:
        return self is not Outcome.HIT

    @property
    def evicted(self) -> bool:
        return self is Outcome.MISS_EVICTION


@dataclass
class CacheBlock:
    """container for a cache line (way).

    Fields:
    - tag: the tag stored in the line
    - valid: whether the line currently holds useful data
    """

    tag: Optional[int] = None
    valid: bool = False


class CacheSet:
    """Bounded LRU-ordered collection of blocks.

    OrderedDict keeps insertion order; we move accessed blocks to the end so
    the least recently used block is at the beginning. Keying by tag means a
    set can never hold two live blocks with the same tag.
    """

    def __init__(self, associativity: int):
        if associativity < 1:
            raise ValueError("associativity must be >= 1")
        self.associativity = int(associativity)
        self._blocks: "OrderedDict[int, CacheBlock]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def is_full(self) -> bool:
        return len(self._blocks) >= self.associativity

    @property
    def blocks(self) -> List[CacheBlock]:
        """Blocks from most to least recently used."""
        return list(reversed(self._blocks.values()))

    def tags(self) -> List[int]:
        """Tags from most to least recently used."""
        return [block.tag for block in self.blocks]

    def lookup(self, tag: int) -> Optional[CacheBlock]:
        block = self._blocks.get(tag)
        if block is not None and block.valid:
            return block
        return None

    def promote(self, tag: int) -> None:
        """Mark `tag` as most recently used."""
        self._blocks.move_to_end(tag)

    def insert(self, tag: int) -> Optional[CacheBlock]:
        """Install a new valid block for `tag` as most recently used.

        When the set is already full the least recently used block is removed
        first and returned; otherwise returns None.
        """
        evicted = None
        if self.is_full:
            _, evicted = self._blocks.popitem(last=False)
        self._blocks[tag] = CacheBlock(tag=tag, valid=True)
        return evicted

    def access(self, tag: int) -> Outcome:
        if self.lookup(tag) is not None:
            self.promote(tag)
            return Outcome.HIT
        evicted = self.insert(tag)
        if evicted is not None:
            return Outcome.MISS_EVICTION
        return Outcome.MISS

    def reset(self) -> None:
        self._blocks.clear()


class Cache:
    """Set-associative cache with LRU replacement.
    """

    def __init__(self, set_bits: int, associativity: int, block_bits: int):
        # s = 0 and b = 0 are valid geometries (one set, one-byte blocks)
        if set_bits < 0:
            raise ValueError("set_bits must be >= 0")
        if block_bits < 0:
            raise ValueError("block_bits must be >= 0")
        if associativity < 1:
            raise ValueError("associativity must be >= 1")

        self.set_bits = set_bits
        self.block_bits = block_bits
        self.associativity = associativity
        self.num_sets = 1 << set_bits
        self.block_size = 1 << block_bits
        self.decoder = AddressDecoder(set_bits, block_bits)
        self.sets: List[CacheSet] = [CacheSet(associativity) for _ in range(self.num_sets)]
        logger.debug(
            "cache built: %d sets x %d ways, %d-byte blocks",
            self.num_sets, self.associativity, self.block_size,
        )

    def access(self, address: int) -> Outcome:
        """Perform a cache access and return its outcome."""
        set_index, tag = self.decoder.decode(address)
        return self.sets[set_index].access(tag)

    def occupancy(self) -> int:
        """Number of valid blocks across all sets."""
        return sum(len(s) for s in self.sets)

    def reset(self):
        """Clear cache contents.
        """
        for s in self.sets:
            s.reset()

    def dump(self) -> List[str]:
        """One line per non-empty set, tags listed MRU first."""
        lines = []
        for index, cache_set in enumerate(self.sets):
            if not len(cache_set):
                continue
            chain = " -> ".join(format(tag, "x") for tag in cache_set.tags())
            lines.append(f"set {index}: {chain}")
        return lines
