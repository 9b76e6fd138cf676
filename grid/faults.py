"""
Manual Fault Tracking

Ordered registry of components under operator-injected fault. Iteration
order is injection order, so positions shown to an operator stay stable
until a fault is resolved.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List
from dataclasses_json import dataclass_json

from .exceptions import InvalidIndex


@dataclass_json
@dataclass
class ActiveFault:
    """Fault asserted on a named component"""
    name: str
    component_type: str  # source, load
    injected_at_cycle: int = 0


class FaultSet:
    """Insertion-ordered set of faulted component names"""

    def __init__(self):
        self._faults: Dict[str, ActiveFault] = {}

    def add(self, fault: ActiveFault) -> bool:
        """Register a fault; returns False if the name is already faulted"""
        if fault.name in self._faults:
            return False
        self._faults[fault.name] = fault
        return True

    def remove(self, name: str) -> ActiveFault:
        return self._faults.pop(name)

    def get(self, name: str) -> ActiveFault:
        return self._faults[name]

    def names(self) -> List[str]:
        return list(self._faults)

    def name_at(self, position: int) -> str:
        """Name of the fault shown at a given position"""
        if not 0 <= position < len(self._faults):
            raise InvalidIndex(position, "fault", len(self._faults))
        return self.names()[position]

    def to_list(self) -> List[Dict]:
        return [fault.to_dict() for fault in self._faults.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._faults

    def __iter__(self) -> Iterator[ActiveFault]:
        return iter(list(self._faults.values()))

    def __len__(self) -> int:
        return len(self._faults)
