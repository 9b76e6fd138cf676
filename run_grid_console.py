#!/usr/bin/env python3
"""
Smart Grid Console

Interactive operator menu for the grid simulator. Builds the default
grid, then reads menu choices and forwards them as commands.
"""

import argparse
from typing import Callable, List

from loguru import logger

from grid.grid_components import Load, PowerSource
from simulation.config import GridConfig, setup_logging
from simulation.grid_manager import GridManager
from simulation.commands import CommandResult, GridCommandProcessor


MENU = """
=== Smart Grid Menu ===
1. Run simulation cycle
2. Inject fault
3. Resolve fault
4. Disconnect load
5. Reconnect load
6. Show breaker states
7. Add new load
8. Add new source
9. Reset breaker
10. Show grid status
11. Disconnect source
12. Reconnect source
13. Export cycle history
0. Exit"""


def print_section(title: str):
    print(f"\n{'='*60}")
    print(f"⚡ {title}")
    print('='*60)


def build_default_grid(config: GridConfig) -> GridManager:
    """Two sources and three prioritized loads"""
    manager = GridManager(config)
    manager.add_source(PowerSource.fluctuating(
        "SolarFarm-A",
        nominal_kw=config.solar_nominal_kw,
        min_output_kw=config.fluctuating_min_kw,
        max_output_kw=config.fluctuating_max_kw
    ))
    manager.add_source(PowerSource.fixed("HydroStation", 60.0))
    manager.add_load(Load("Factory-A", 30, 2))
    manager.add_load(Load("House-B", 15, 1))
    manager.add_load(Load("Shop-C", 10, 3))
    return manager


def render(result: CommandResult, write: Callable[[str], None] = print):
    for line in result.lines:
        write(line)
    if result.success:
        write(result.message)
    else:
        write(f"[Error] {result.message}")


def _numbered(names: List[str], write: Callable[[str], None]):
    for i, name in enumerate(names):
        write(f"{i}: {name}")


def handle_choice(choice: str, processor: GridCommandProcessor,
                  read: Callable[[str], str] = input,
                  write: Callable[[str], None] = print) -> CommandResult:
    """Prompt for the arguments of one menu entry and execute it"""
    manager = processor.manager

    if choice == "1":
        return processor.execute("run-cycle")

    if choice == "2":
        write("Select target to fault:")
        for i, load in enumerate(manager.loads):
            write(f"L{i}: Load: {load.name}")
        for i, source in enumerate(manager.sources):
            write(f"S{i}: Source: {source.name}")
        return processor.execute("inject-fault", read("Target: ").strip())

    if choice == "3":
        write("Active faults:")
        _numbered(manager.faults.names(), write)
        target = read("Fault number or name: ").strip()
        return processor.execute("resolve-fault", f"#{target}" if target.isdigit() else target)

    if choice in ("4", "5"):
        _numbered([load.name for load in manager.loads], write)
        command = "disconnect-load" if choice == "4" else "reconnect-load"
        return processor.execute(command, read("Load index: ").strip())

    if choice == "6":
        return processor.execute("show-breakers")

    if choice == "7":
        args = read("Name demand(kW) priority: ").split()
        return processor.execute("add-load", *args)

    if choice == "8":
        args = read("Name power(kW) type(1=solar, 2/3=renewable, other=fixed): ").split()
        return processor.execute("add-source", *args)

    if choice == "9":
        return processor.execute("reset-breaker", read("Component name: ").strip())

    if choice == "10":
        return processor.execute("status")

    if choice in ("11", "12"):
        _numbered([source.name for source in manager.sources], write)
        command = "disconnect-source" if choice == "11" else "reconnect-source"
        return processor.execute(command, read("Source index: ").strip())

    if choice == "13":
        return processor.execute("export-history")

    return CommandResult("menu", False, "Invalid choice.")


def run_menu(processor: GridCommandProcessor,
             read: Callable[[str], str] = input,
             write: Callable[[str], None] = print):
    """Menu loop until the operator enters 0 or input ends"""
    while True:
        write(MENU)
        try:
            choice = read("Enter choice: ").strip()
        except EOFError:
            break

        if choice == "0":
            write("Exiting simulation.")
            break

        try:
            result = handle_choice(choice, processor, read, write)
        except EOFError:
            break
        render(result, write)


def main():
    """Main entry point"""

    parser = argparse.ArgumentParser(description='Smart Grid Load Balancing Simulator')
    parser.add_argument('--config', type=str, help='Configuration file path')
    parser.add_argument('--seed', type=int, help='Seed for fluctuating source output')
    parser.add_argument('--log-level', type=str, help='Console log level (DEBUG, INFO, WARNING)')
    parser.add_argument('--log-file', type=str, help='Also log to this file')

    args = parser.parse_args()

    config = GridConfig.from_file(args.config) if args.config else GridConfig()
    if args.seed is not None:
        config.seed = args.seed
    if args.log_level:
        config.log_level = args.log_level.upper()
    if args.log_file:
        config.log_file = args.log_file

    setup_logging(config)

    print_section("SMART GRID SIMULATOR")
    manager = build_default_grid(config)
    logger.info(f"Default grid ready: {manager.get_summary()}")

    run_menu(GridCommandProcessor(manager))
    return 0


if __name__ == "__main__":
    exit(main())
