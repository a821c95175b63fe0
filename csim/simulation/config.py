"""Simulation configuration.

Holds the (s, E, b) geometry plus the trace to replay, and performs the
boundary check that keeps degenerate configurations away from the core.
"""
from dataclasses import dataclass
from typing import List, Optional


class ConfigurationError(ValueError):
    """Raised when a required setting is missing or zero."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__("Missing required command line argument: " + ", ".join(self.missing))


@dataclass
class SimulationConfig:
    set_bits: Optional[int] = None
    associativity: Optional[int] = None
    block_bits: Optional[int] = None
    trace_file: Optional[str] = None
    verbose: bool = False

    def validate(self) -> "SimulationConfig":
        missing = []
        for name in ("set_bits", "associativity", "block_bits"):
            value = getattr(self, name)
            if value is None or value <= 0:
                missing.append(name)
        if not self.trace_file:
            missing.append("trace_file")
        if missing:
            raise ConfigurationError(missing)
        return self

    @property
    def num_sets(self) -> int:
        return 1 << self.set_bits

    @property
    def block_size(self) -> int:
        return 1 << self.block_bits

    @property
    def capacity(self) -> int:
        """Total data capacity in bytes (S * E * B)."""
        return self.num_sets * self.associativity * self.block_size
