"""
Grid Command Processor

Text command surface over the grid manager. Commands never raise: every
failure comes back as an unsuccessful CommandResult.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from grid.grid_components import Load, PowerSource, SourceKind
from grid.exceptions import GridError
from simulation.grid_manager import GridManager


@dataclass
class CommandResult:
    """Outcome of a single operator command"""
    command: str
    success: bool
    message: str = ""
    data: Any = None
    lines: List[str] = field(default_factory=list)


class GridCommandProcessor:
    """Dispatch operator commands to a GridManager"""

    def __init__(self, manager: GridManager):
        self.manager = manager
        self.commands: Dict[str, Callable[..., CommandResult]] = {
            'run-cycle': self.run_cycle,
            'inject-fault': self.inject_fault,
            'resolve-fault': self.resolve_fault,
            'list-faults': self.list_faults,
            'disconnect-load': lambda index: self._set_load(index, False),
            'reconnect-load': lambda index: self._set_load(index, True),
            'disconnect-source': lambda index: self._set_source(index, False),
            'reconnect-source': lambda index: self._set_source(index, True),
            'reset-breaker': self.reset_breaker,
            'show-breakers': self.show_breakers,
            'add-load': self.add_load,
            'add-source': self.add_source,
            'status': self.status,
            'export-history': self.export_history,
        }

    def execute(self, command: str, *args: Any) -> CommandResult:
        handler = self.commands.get(command)
        if handler is None:
            logger.warning(f"Unknown command: {command}")
            return CommandResult(command, False, f"Unknown command: {command}")

        try:
            result = handler(*args)
        except GridError as e:
            logger.warning(f"Command {command} rejected: {e}")
            return CommandResult(command, False, str(e))
        except (TypeError, ValueError) as e:
            logger.warning(f"Command {command} has bad arguments {args}: {e}")
            return CommandResult(command, False, f"Bad arguments for {command}: {e}")

        result.command = command
        return result

    def execute_line(self, line: str) -> CommandResult:
        """Execute a whitespace-separated command line"""
        parts = line.split()
        if not parts:
            return CommandResult("", False, "Empty command")
        return self.execute(parts[0], *parts[1:])

    # ========================= Target Resolution =========================

    def resolve_target(self, target: str) -> str:
        """Accept a component name or the positional tokens L<i> / S<i>"""
        target = str(target).strip()
        if target in self.manager.breakers:
            return target

        prefix, digits = target[:1].upper(), target[1:]
        if prefix in ("L", "S") and digits.isdigit():
            index = int(digits)
            if prefix == "L":
                loads = self.manager.loads
                return loads[self.manager.check_index(index, "load", len(loads))].name
            sources = self.manager.sources
            return sources[self.manager.check_index(index, "source", len(sources))].name
        return target

    # ========================= Handlers =========================

    def run_cycle(self) -> CommandResult:
        report = self.manager.run_cycle()
        return CommandResult("run-cycle", True, f"Cycle {report.cycle} complete",
                             data=report, lines=report.log_lines())

    def inject_fault(self, target: str) -> CommandResult:
        name = self.resolve_target(target)
        added = self.manager.inject_fault(name)
        message = f"[Fault] Injected at {name}" if added else f"[Fault] {name} already faulted"
        return CommandResult("inject-fault", True, message, data=name)

    def resolve_fault(self, target: str) -> CommandResult:
        target = str(target)
        if target.startswith("#"):
            name = self.manager.faults.name_at(int(target[1:]))
        else:
            name = self.resolve_target(target)
        report = self.manager.resolve_fault(name)
        return CommandResult("resolve-fault", True, f"[Fault] Resolved: {name}",
                             data=report, lines=report.log_lines())

    def list_faults(self) -> CommandResult:
        names = self.manager.faults.names()
        lines = [f"{i}: {name}" for i, name in enumerate(names)]
        return CommandResult("list-faults", True, f"{len(names)} active fault(s)",
                             data=names, lines=lines)

    def _set_load(self, index: Any, connected: bool) -> CommandResult:
        position = int(index)
        self.manager.set_load_connectivity(position, connected)
        name = self.manager.loads[position].name
        return CommandResult("", True, f"Load {name} {'reconnected' if connected else 'disconnected'}")

    def _set_source(self, index: Any, connected: bool) -> CommandResult:
        position = int(index)
        self.manager.set_source_connectivity(position, connected)
        name = self.manager.sources[position].name
        return CommandResult("", True, f"Source {name} {'reconnected' if connected else 'disconnected'}")

    def reset_breaker(self, target: str) -> CommandResult:
        name = self.resolve_target(target)
        self.manager.reset_breaker(name)
        return CommandResult("reset-breaker", True, f"Breaker {name} reset", data=name)

    def show_breakers(self) -> CommandResult:
        status = self.manager.breaker_status()
        lines = ["[Breaker Status]"] + [f"{name}: {state}" for name, state in status.items()]
        return CommandResult("show-breakers", True, f"{len(status)} breaker(s)",
                             data=status, lines=lines)

    def add_load(self, name: str, demand: Any, priority: Optional[Any] = None) -> CommandResult:
        if priority is None:
            priority = self.manager.config.default_priority
        load = Load(name=name, demand_kw=float(demand), priority=int(priority))
        self.manager.add_load(load)
        return CommandResult("add-load", True, f"Load {name} added", data=load)

    def add_source(self, name: str, power: Any, source_type: Any = "fixed") -> CommandResult:
        kind = SourceKind.parse(source_type)
        config = self.manager.config
        if kind == SourceKind.FLUCTUATING:
            source = PowerSource.fluctuating(
                name,
                nominal_kw=config.solar_nominal_kw,
                min_output_kw=config.fluctuating_min_kw,
                max_output_kw=config.fluctuating_max_kw
            )
        else:
            source = PowerSource.fixed(name, float(power), renewable=SourceKind.is_renewable_choice(source_type))
        report = self.manager.add_source(source)
        return CommandResult("add-source", True, f"Source {name} added",
                             data=report, lines=report.log_lines())

    def status(self) -> CommandResult:
        lines = [source.describe() for source in self.manager.sources]
        lines += [load.describe() for load in self.manager.loads]
        return CommandResult("status", True, "Grid status",
                             data=self.manager.get_summary(), lines=lines)

    def export_history(self, path: Optional[str] = None) -> CommandResult:
        if path is None:
            path = str(Path(self.manager.config.export_dir) / "cycle_history.csv")
        output_path = self.manager.history.export_csv(path)
        return CommandResult("export-history", True, f"History exported to {output_path}",
                             data=str(output_path))
