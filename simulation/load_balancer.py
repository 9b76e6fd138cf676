"""
Load Balancer

Plans load shedding during a power deficit and load restoration when
capacity is available. Plans are ordered action sequences; the grid
manager applies them.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from loguru import logger

from grid.grid_components import Breaker, Load


@dataclass
class BalancingAction:
    """Single step of a balancing plan"""
    step: int
    type: str  # 'load_shed', 'reconnect'
    target: str  # load name
    demand_kw: float
    reason: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            'step': self.step,
            'type': self.type,
            'target': self.target,
            'demand_kw': self.demand_kw,
            'reason': self.reason
        }


@dataclass
class BalancingPlan:
    """Actions for one cycle plus the demand they leave connected"""
    deficit: bool
    total_power_kw: float
    initial_demand_kw: float
    final_demand_kw: float
    actions: List[BalancingAction]

    @property
    def shed(self) -> List[str]:
        return [a.target for a in self.actions if a.type == 'load_shed']

    @property
    def reconnected(self) -> List[str]:
        return [a.target for a in self.actions if a.type == 'reconnect']


class LoadBalancer:
    """
    Priority-driven load balancing

    Deficit: connected loads are shed in descending priority order until
    power covers demand. Surplus: restorable loads are reconnected in
    ascending priority order while each one still fits. Equal priorities
    keep insertion order.
    """

    def plan(self, loads: List[Load], breakers: Dict[str, Breaker],
             total_power: float, total_demand: float) -> BalancingPlan:
        if total_power < total_demand:
            logger.warning(f"Power deficit detected: {total_power:.1f}kW supply vs "
                           f"{total_demand:.1f}kW demand. Shedding loads by priority.")
            actions, final_demand = self._plan_shedding(loads, breakers, total_power, total_demand)
            deficit = True
        else:
            actions, final_demand = self._plan_restoration(loads, breakers, total_power, total_demand)
            deficit = False

        return BalancingPlan(
            deficit=deficit,
            total_power_kw=total_power,
            initial_demand_kw=total_demand,
            final_demand_kw=final_demand,
            actions=actions
        )

    def _plan_shedding(self, loads: List[Load], breakers: Dict[str, Breaker],
                       total_power: float, total_demand: float) -> Tuple[List[BalancingAction], float]:
        # Tripped loads already count as zero demand; shedding them again would
        # stop shedding while power is still below demand
        candidates = [l for l in loads if l.is_connected() and not breakers[l.name].is_tripped()]
        candidates = sorted(candidates, key=lambda l: l.priority, reverse=True)

        actions = []
        for load in candidates:
            total_demand -= load.demand_kw
            actions.append(BalancingAction(
                step=len(actions) + 1,
                type='load_shed',
                target=load.name,
                demand_kw=load.demand_kw,
                reason=f"Overload: priority {load.priority} shed"
            ))
            if total_power >= total_demand:
                break

        return actions, total_demand

    def _plan_restoration(self, loads: List[Load], breakers: Dict[str, Breaker],
                          total_power: float, total_demand: float) -> Tuple[List[BalancingAction], float]:
        candidates = [l for l in loads if not l.is_connected() and not breakers[l.name].is_tripped()]
        candidates = sorted(candidates, key=lambda l: l.priority)

        actions = []
        for load in candidates:
            if total_power >= total_demand + load.demand_kw:
                total_demand += load.demand_kw
                actions.append(BalancingAction(
                    step=len(actions) + 1,
                    type='reconnect',
                    target=load.name,
                    demand_kw=load.demand_kw,
                    reason=f"Capacity available: {total_power - total_demand:.1f}kW headroom"
                ))
            else:
                logger.debug(f"Load {load.name} ({load.demand_kw:g}kW) does not fit, left disconnected")

        return actions, total_demand
