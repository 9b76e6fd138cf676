"""
Grid Simulation Package

Balancing cycle, fault workflow, cycle reporting and the operator command surface.
"""

from .config import GridConfig, setup_logging
from .load_balancer import LoadBalancer, BalancingAction, BalancingPlan
from .cycle_report import CycleReport, CycleHistory, SourceReading
from .grid_manager import GridManager
from .commands import GridCommandProcessor, CommandResult

__version__ = "1.0.0"
__all__ = [
    "GridConfig",
    "setup_logging",
    "LoadBalancer",
    "BalancingAction",
    "BalancingPlan",
    "CycleReport",
    "CycleHistory",
    "SourceReading",
    "GridManager",
    "GridCommandProcessor",
    "CommandResult"
]
