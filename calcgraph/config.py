# calcgraph/config.py
"""
Engine configuration.

One dataclass holds every tunable of the engine; a graph keeps a reference to
the config it was created with so that presets and helpers agree on the same
constants.
"""
from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Configuration for graph construction and evaluation."""
    # Registry
    exp_clamp: float = 5.0  # exponent cap for the exponential op (overflow guard)

    # Graph store
    reject_cycles: bool = True  # connect() refuses edges that would close a cycle

    # Finite-difference checks
    fd_step: float = 1e-5       # central-difference half width h
    fd_tolerance: float = 1e-3  # allowed |analytic - numeric|

    # Logging
    verbose: bool = False

    def __post_init__(self):
        if self.fd_step <= 0:
            raise ValueError(f"fd_step must be positive, got {self.fd_step}")
        if self.fd_tolerance <= 0:
            raise ValueError(f"fd_tolerance must be positive, got {self.fd_tolerance}")


DEFAULT_CONFIG = EngineConfig()
