"""
Grid Components - Breakers, Power Sources and Loads
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from dataclasses_json import dataclass_json
import numpy as np

from .exceptions import InvalidParameter


class TripCause(Enum):
    """Why a breaker opened"""
    FAULT = "fault"          # manual fault injection
    OVERLOAD = "overload"    # automatic load shedding


class SourceKind(Enum):
    """Power source variants"""
    FIXED = "fixed"
    FLUCTUATING = "fluctuating"

    @classmethod
    def parse(cls, value: Union[str, int, "SourceKind"]) -> "SourceKind":
        """Resolve a menu number or keyword to a kind"""
        if isinstance(value, SourceKind):
            return value
        if isinstance(value, int) or str(value).strip().isdigit():
            return cls.FLUCTUATING if int(value) == 1 else cls.FIXED

        word = str(value).strip().lower()
        if word in ("fluctuating", "solar"):
            return cls.FLUCTUATING
        if word in ("fixed", "renewable"):
            return cls.FIXED
        raise InvalidParameter(f"Unknown source type: {value}", value)

    @staticmethod
    def is_renewable_choice(value: Union[str, int]) -> bool:
        """Menu types 1-3 and the 'renewable'/'solar' keywords are renewable"""
        if isinstance(value, int) or str(value).strip().isdigit():
            return int(value) in (1, 2, 3)
        return str(value).strip().lower() in ("renewable", "fluctuating", "solar")


def _check_name(name: str):
    if not name or not str(name).strip():
        raise InvalidParameter("Component name must not be empty", name)


def _check_kw(label: str, name: str, value: float):
    if not np.isfinite(value) or value < 0:
        raise InvalidParameter(f"Invalid {label} for {name}: {value}", value)


@dataclass_json
@dataclass
class Breaker:
    """Protective latch owned by one named component"""
    name: str
    tripped: bool = False
    cause: Optional[TripCause] = None

    def trip(self, cause: TripCause = TripCause.FAULT):
        if not self.tripped:
            self.tripped = True
            self.cause = cause

    def reset(self):
        self.tripped = False
        self.cause = None

    def is_tripped(self) -> bool:
        return self.tripped

    @property
    def status(self) -> str:
        return "TRIPPED" if self.tripped else "OK"


@dataclass_json
@dataclass
class PowerSource:
    """Generating unit, either fixed output or fluctuating (solar-like)"""
    name: str
    kind: SourceKind
    output_kw: float
    renewable: bool = False
    connected: bool = True
    min_output_kw: float = 20.0
    max_output_kw: float = 50.0

    def __post_init__(self):
        _check_name(self.name)
        _check_kw("output", self.name, self.output_kw)
        _check_kw("minimum output", self.name, self.min_output_kw)
        _check_kw("maximum output", self.name, self.max_output_kw)
        if self.kind == SourceKind.FLUCTUATING and self.min_output_kw >= self.max_output_kw:
            raise InvalidParameter(
                f"Empty output range for {self.name}: [{self.min_output_kw}, {self.max_output_kw})",
                (self.min_output_kw, self.max_output_kw)
            )

    @classmethod
    def fixed(cls, name: str, output_kw: float, renewable: bool = False) -> 'PowerSource':
        """Create a constant-output source"""
        return cls(name=name, kind=SourceKind.FIXED, output_kw=float(output_kw), renewable=renewable)

    @classmethod
    def fluctuating(cls, name: str, nominal_kw: float = 50.0,
                    min_output_kw: float = 20.0, max_output_kw: float = 50.0) -> 'PowerSource':
        """Create a renewable source whose output is redrawn every cycle"""
        return cls(
            name=name,
            kind=SourceKind.FLUCTUATING,
            output_kw=float(nominal_kw),
            renewable=True,
            min_output_kw=float(min_output_kw),
            max_output_kw=float(max_output_kw)
        )

    def produce_output(self, rng: np.random.Generator) -> float:
        """Output for this cycle; fluctuating sources cache the new draw"""
        if self.kind == SourceKind.FLUCTUATING:
            self.output_kw = float(rng.uniform(self.min_output_kw, self.max_output_kw))
        return self.output_kw

    def is_connected(self) -> bool:
        return self.connected

    def disconnect(self):
        self.connected = False

    def reconnect(self):
        self.connected = True

    def describe(self) -> str:
        return f"[Source] {self.name}: {self.output_kw:.1f}kW"


@dataclass_json
@dataclass
class Load:
    """Consumer with a fixed demand and a priority (higher = more important)"""
    name: str
    demand_kw: float
    priority: int = 5
    connected: bool = True

    def __post_init__(self):
        _check_name(self.name)
        _check_kw("demand", self.name, self.demand_kw)

    def is_connected(self) -> bool:
        return self.connected

    def disconnect(self):
        self.connected = False

    def reconnect(self):
        self.connected = True

    def describe(self) -> str:
        return (f"[Load] {self.name}: {self.demand_kw:g}kW, Priority: {self.priority}, "
                f"Connected: {'Yes' if self.connected else 'No'}")
