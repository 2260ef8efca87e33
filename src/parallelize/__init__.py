"""parallelize package root."""

from parallelize.exceptions import ParallelizeError, StructuralError
from parallelize.invariants import never

__all__ = ["__version__", "ParallelizeError", "StructuralError", "never"]

__version__ = "0.1.0"
