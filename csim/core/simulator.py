"""CacheSimulator coordinates cache accesses and statistics.
Feeds trace records into the core Cache and updates the hit/miss/eviction counters.
"""
import logging
from typing import Callable, Iterable, Iterator, List, Optional

from .cache import Cache, Outcome
from ..data.stats_export import Statistics
from ..data.trace import AccessKind, AccessRecord

logger = logging.getLogger(__name__)

# number of cache accesses each kind of trace record performs
ACCESSES_PER_KIND = {
    AccessKind.INSTRUCTION: 0,
    AccessKind.LOAD: 1,
    AccessKind.STORE: 1,
    AccessKind.MODIFY: 2,
}


class CacheSimulator:
    def __init__(self, cache: Cache, stats: Optional[Statistics] = None):
        self.cache = cache
        self.stats = stats or Statistics()
        self.sequence: Iterator[AccessRecord] = iter(())

    def reset(self):
        # clear stats and drop any pending records
        self.stats.reset()
        self.sequence = iter(())
        # also clear cache contents
        self.cache.reset()

    def load_sequence(self, records: Iterable[AccessRecord]):
        # records are consumed lazily, one per step(), and only once
        self.sequence = iter(records)

    def process(self, record: AccessRecord) -> List[Outcome]:
        """Apply one trace record to the cache and return the access outcomes.

        A modify is a load followed by a store to the same address, so it
        yields either (hit, hit) or (miss, hit). Instruction fetches are not
        simulated.
        """
        outcomes = []
        for _ in range(ACCESSES_PER_KIND[record.kind]):
            outcome = self.cache.access(record.address)
            self.stats.record_access(outcome)
            outcomes.append(outcome)
        self.stats.record_trace_entry(record.kind.value)
        return outcomes

    def step(self) -> Optional[dict]:
        record = next(self.sequence, None)
        if record is None:
            return None
        outcomes = self.process(record)
        return {
            'record': record,
            'outcomes': outcomes,
            'stats': {
                'hits': self.stats.hits,
                'misses': self.stats.misses,
                'evictions': self.stats.evictions,
                'hit_rate': self.stats.hit_rate,
            },
        }

    def run_all(self, callback: Optional[Callable[[dict], None]] = None) -> Statistics:
        while True:
            info = self.step()
            if info is None:
                break
            if callback:
                callback(info)
        logger.debug("trace exhausted: %s", self.stats.summary())
        return self.stats
