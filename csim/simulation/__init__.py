"""Simulation package.

Exposes the Simulation driver and its configuration at `csim.simulation`.
"""
from .config import ConfigurationError, SimulationConfig
from .simulation import Simulation, format_verbose

__all__ = ["ConfigurationError", "Simulation", "SimulationConfig", "format_verbose"]
