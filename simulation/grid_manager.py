"""
Grid Manager - Core Controller

Owns every source, load, breaker and active fault, runs the balancing
cycle and the manual fault workflow. All mutators validate before
touching state, so a rejected command leaves the grid unchanged.
"""

import json
import datetime
from typing import Dict, List, Optional, Tuple, Any, Union

import numpy as np
import pandas as pd
from loguru import logger

from grid.grid_components import Breaker, Load, PowerSource, TripCause
from grid.faults import ActiveFault, FaultSet
from grid.exceptions import (
    DuplicateName, FaultActive, FaultNotActive, InvalidIndex, UnknownComponent
)
from simulation.config import GridConfig
from simulation.cycle_report import CycleHistory, CycleReport, SourceReading
from simulation.load_balancer import LoadBalancer


class GridManager:
    """
    Smart grid controller

    Balances available power against demand once per cycle by shedding
    connected loads during a deficit and restoring disconnected ones when
    capacity allows. A tripped breaker removes its component from the
    cycle regardless of the component's own connect flag.
    """

    def __init__(self, config: Optional[GridConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or GridConfig()
        self.rng = rng if rng is not None else self.config.make_rng()

        self._sources: List[PowerSource] = []
        self._loads: List[Load] = []
        self._breakers: Dict[str, Breaker] = {}
        self._faults = FaultSet()

        self.balancer = LoadBalancer()
        self.history = CycleHistory(limit=self.config.history_limit)
        self.cycle_count = 0

    # ========================= Accessors =========================

    @property
    def sources(self) -> List[PowerSource]:
        return list(self._sources)

    @property
    def loads(self) -> List[Load]:
        return list(self._loads)

    @property
    def breakers(self) -> Dict[str, Breaker]:
        return dict(self._breakers)

    @property
    def faults(self) -> FaultSet:
        return self._faults

    def get_source(self, name: str) -> PowerSource:
        for source in self._sources:
            if source.name == name:
                return source
        raise UnknownComponent(name)

    def get_load(self, name: str) -> Load:
        for load in self._loads:
            if load.name == name:
                return load
        raise UnknownComponent(name)

    def find_component(self, name: str) -> Tuple[str, Union[PowerSource, Load]]:
        """Return ('source' | 'load', component) for a registered name"""
        for source in self._sources:
            if source.name == name:
                return "source", source
        for load in self._loads:
            if load.name == name:
                return "load", load
        raise UnknownComponent(name)

    def breaker(self, name: str) -> Breaker:
        if name not in self._breakers:
            raise UnknownComponent(name)
        return self._breakers[name]

    # ========================= Registration =========================

    def add_source(self, source: PowerSource) -> CycleReport:
        """Register a source and re-balance immediately"""
        self._check_new_name(source.name)
        self._sources.append(source)
        self._breakers[source.name] = Breaker(source.name)
        logger.info(f"Added {source.kind.value} source {source.name} ({source.output_kw:.1f}kW)")
        return self.run_cycle()

    def add_load(self, load: Load):
        """Register a load; takes effect at the next cycle"""
        self._check_new_name(load.name)
        self._loads.append(load)
        self._breakers[load.name] = Breaker(load.name)
        logger.info(f"Added load {load.name} ({load.demand_kw:g}kW, priority {load.priority})")

    def _check_new_name(self, name: str):
        if name in self._breakers:
            logger.warning(f"Rejected duplicate component name {name}")
            raise DuplicateName(name)

    # ========================= Balancing Cycle =========================

    def run_cycle(self) -> CycleReport:
        """Tally power and demand, then shed or restore loads"""
        self.cycle_count += 1
        logger.info(f"=== Cycle {self.cycle_count} === Simulation start")

        total_power = 0.0
        readings = []
        for source in self._sources:
            if self._breakers[source.name].is_tripped():
                continue
            output = source.produce_output(self.rng)
            counted = source.is_connected()
            if counted:
                total_power += output
            readings.append(SourceReading(source.name, output, source.is_connected(), counted))
            logger.debug(f"[Source] {source.name} generating {output:.1f}kW "
                         f"({'connected' if counted else 'disconnected'})")

        total_demand = 0.0
        for load in self._loads:
            if self._breakers[load.name].is_tripped():
                continue
            if load.is_connected():
                total_demand += load.demand_kw
            logger.debug(load.describe())

        logger.info(f"Total power: {total_power:.1f}kW, total demand: {total_demand:.1f}kW")

        plan = self.balancer.plan(self._loads, self._breakers, total_power, total_demand)
        for action in plan.actions:
            load = self.get_load(action.target)
            if action.type == 'load_shed':
                load.disconnect()
                self._breakers[load.name].trip(TripCause.OVERLOAD)
                logger.info(f"[Trip] Load {load.name} tripped due to overload")
            elif action.type == 'reconnect':
                load.reconnect()
                logger.info(f"[Reconnect] Load {load.name} reconnected")

        for fault in self._faults:
            logger.info(f"Active fault: {fault.name}")

        report = CycleReport(
            cycle=self.cycle_count,
            total_power_kw=total_power,
            demand_before_kw=total_demand,
            total_demand_kw=plan.final_demand_kw,
            deficit=plan.deficit,
            source_readings=readings,
            actions=plan.actions,
            active_faults=self._faults.names()
        )
        self.history.append(report)
        logger.info(f"=== Cycle {self.cycle_count} === Simulation end "
                    f"(margin {report.margin_kw:.1f}kW)")
        return report

    # ========================= Fault Workflow =========================

    def inject_fault(self, target: str) -> bool:
        """
        Put a component under manual fault and trip its breaker

        Returns False when the component was already faulted; state is
        unchanged in that case.
        """
        component_type, _ = self.find_component(target)
        added = self._faults.add(ActiveFault(target, component_type, self.cycle_count))
        self._breakers[target].trip(TripCause.FAULT)
        if added:
            logger.warning(f"[Fault] Injected at {target}")
        else:
            logger.info(f"[Fault] {target} already faulted")
        return added

    def resolve_fault(self, target: str) -> CycleReport:
        """Clear a manual fault, reset the breaker and re-balance"""
        if target not in self._faults:
            self.find_component(target)
            raise FaultNotActive(target)

        self._faults.remove(target)
        self._breakers[target].reset()
        logger.success(f"[Fault] Resolved: {target}")
        return self.run_cycle()

    def reset_breaker(self, name: str):
        """Operator reset of a breaker that is not held open by a fault"""
        breaker = self.breaker(name)
        if name in self._faults:
            raise FaultActive(name)
        if breaker.is_tripped():
            breaker.reset()
            logger.info(f"Breaker {name} reset by operator")

    # ========================= Manual Overrides =========================

    def set_load_connectivity(self, index: int, connected: bool):
        load = self._loads[self.check_index(index, "load", len(self._loads))]
        if connected:
            load.reconnect()
        else:
            load.disconnect()
        logger.info(f"Load {load.name} manually {'reconnected' if connected else 'disconnected'}")

    def set_source_connectivity(self, index: int, connected: bool):
        source = self._sources[self.check_index(index, "source", len(self._sources))]
        if connected:
            source.reconnect()
        else:
            source.disconnect()
        logger.info(f"Source {source.name} manually {'reconnected' if connected else 'disconnected'}")

    @staticmethod
    def check_index(index: Any, collection: str, size: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)) or not 0 <= index < size:
            raise InvalidIndex(index, collection, size)
        return int(index)

    # ========================= Status & Export =========================

    def breaker_snapshot(self) -> Dict[str, bool]:
        """Name -> tripped, in registration order"""
        return {name: breaker.is_tripped() for name, breaker in self._breakers.items()}

    def breaker_status(self) -> Dict[str, str]:
        return {name: breaker.status for name, breaker in self._breakers.items()}

    def status_frame(self) -> pd.DataFrame:
        """One row per component"""
        rows = []
        for source in self._sources:
            rows.append({
                'type': 'source',
                'name': source.name,
                'kind': source.kind.value,
                'kw': source.output_kw,
                'priority': None,
                'connected': source.is_connected(),
                'breaker': self._breakers[source.name].status,
                'faulted': source.name in self._faults
            })
        for load in self._loads:
            rows.append({
                'type': 'load',
                'name': load.name,
                'kind': 'load',
                'kw': load.demand_kw,
                'priority': load.priority,
                'connected': load.is_connected(),
                'breaker': self._breakers[load.name].status,
                'faulted': load.name in self._faults
            })
        return pd.DataFrame(rows, columns=['type', 'name', 'kind', 'kw', 'priority',
                                           'connected', 'breaker', 'faulted'])

    def get_summary(self) -> Dict[str, Any]:
        """Grid summary statistics"""
        return {
            "total_sources": len(self._sources),
            "total_loads": len(self._loads),
            "connected_loads": sum(1 for l in self._loads if l.is_connected()),
            "tripped_breakers": sum(1 for b in self._breakers.values() if b.is_tripped()),
            "active_faults": self._faults.names(),
            "nominal_capacity_kw": sum(s.output_kw for s in self._sources),
            "connected_demand_kw": sum(l.demand_kw for l in self._loads if l.is_connected()),
            "cycles_run": self.cycle_count
        }

    def to_json(self) -> str:
        """Export the grid state to JSON"""
        grid_data = {
            "metadata": {
                "cycles_run": self.cycle_count,
                "exported_at": datetime.datetime.now().isoformat()
            },
            "sources": [source.to_dict(encode_json=True) for source in self._sources],
            "loads": [load.to_dict() for load in self._loads],
            "breakers": {name: b.to_dict(encode_json=True) for name, b in self._breakers.items()},
            "faults": self._faults.to_list()
        }
        return json.dumps(grid_data, indent=2, default=str)
