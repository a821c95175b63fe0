"""Simulation driver used by the command line

Builds the cache from a SimulationConfig, replays the trace through the
CacheSimulator and hands back the final statistics.
"""
import logging
from typing import Callable, Iterable, Optional

from csim.core.cache import Cache
from csim.core.simulator import CacheSimulator
from csim.data.stats_export import Statistics
from csim.data.trace import AccessRecord, read_trace
from csim.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)


def format_verbose(info: dict) -> Optional[str]:
    """Render a step() result the way `csim -v` prints it, e.g. `M 20,1 miss hit`.

    Returns None for records that did not touch the cache.
    """
    outcomes = info['outcomes']
    if not outcomes:
        return None
    return f"{info['record']} " + " ".join(o.value for o in outcomes)


class Simulation:
    def __init__(self, config: SimulationConfig):
        self.config = config
        self.simulator = None

    @property
    def cache(self) -> Optional[Cache]:
        return self.simulator.cache if self.simulator is not None else None

    def _create_cache(self):
        # Only create the cache if one does not already exist.
        if self.simulator is not None:
            return
        cfg = self.config
        cache = Cache(set_bits=cfg.set_bits, associativity=cfg.associativity, block_bits=cfg.block_bits)
        self.simulator = CacheSimulator(cache)

    def run(self, records: Iterable[AccessRecord], callback: Optional[Callable[[dict], None]] = None) -> Statistics:
        self._create_cache()
        self.simulator.load_sequence(records)
        stats = self.simulator.run_all(callback)
        if logger.isEnabledFor(logging.DEBUG):
            for line in self.simulator.cache.dump():
                logger.debug(line)
        return stats

    def run_trace(self, callback: Optional[Callable[[dict], None]] = None) -> Statistics:
        """Replay the configured trace file. OSError and TraceFormatError propagate."""
        self.config.validate()
        logger.debug(
            "simulating %s with s=%d E=%d b=%d",
            self.config.trace_file, self.config.set_bits, self.config.associativity, self.config.block_bits,
        )
        return self.run(read_trace(self.config.trace_file), callback)
