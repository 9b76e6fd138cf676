"""
Smart Grid Package

Data model for the grid: breakers, power sources, loads and manual faults.
"""

from .grid_components import (
    Breaker,
    TripCause,
    SourceKind,
    PowerSource,
    Load
)

from .faults import ActiveFault, FaultSet

from .exceptions import (
    GridError,
    UnknownComponent,
    InvalidIndex,
    DuplicateName,
    InvalidParameter,
    FaultNotActive,
    FaultActive
)

__version__ = "1.0.0"
__all__ = [
    "Breaker",
    "TripCause",
    "SourceKind",
    "PowerSource",
    "Load",
    "ActiveFault",
    "FaultSet",
    "GridError",
    "UnknownComponent",
    "InvalidIndex",
    "DuplicateName",
    "InvalidParameter",
    "FaultNotActive",
    "FaultActive"
]
