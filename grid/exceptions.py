"""
Grid Errors

Typed, non-fatal failures raised by the grid controller. A command that
raises one of these has left every collection and breaker unchanged.
"""

from typing import Any


class GridError(Exception):
    """Base class for all grid command failures"""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class UnknownComponent(GridError):
    """No source, load or breaker is registered under the given name"""

    def __init__(self, name: str):
        super().__init__(f"Unknown component: {name}", name)


class InvalidIndex(GridError):
    """Positional index outside the source or load collection"""

    def __init__(self, index: Any, collection: str, size: int):
        super().__init__(
            f"Invalid {collection} index {index} (have {size} {collection}s)", index
        )
        self.collection = collection
        self.size = size


class DuplicateName(GridError):
    """A breaker already exists for this name"""

    def __init__(self, name: str):
        super().__init__(f"Component name already registered: {name}", name)


class InvalidParameter(GridError):
    """Component attribute outside its allowed range"""


class FaultNotActive(GridError):
    """Resolve requested for a component that is not under manual fault"""

    def __init__(self, name: str):
        super().__init__(f"No active fault on {name}", name)


class FaultActive(GridError):
    """Breaker reset refused while the component is still faulted"""

    def __init__(self, name: str):
        super().__init__(f"Cannot reset breaker of {name}: fault still active", name)
