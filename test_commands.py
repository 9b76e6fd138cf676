#!/usr/bin/env python3
"""
Tests for the operator command surface
"""

import pandas as pd
import pytest

from grid import Load, PowerSource, SourceKind
from simulation import GridConfig, GridCommandProcessor, GridManager


@pytest.fixture
def processor():
    manager = GridManager(GridConfig(seed=5, default_priority=7))
    manager.add_source(PowerSource.fixed("Hydro", 60.0))
    manager.add_load(Load("Factory-A", 30, 2))
    manager.add_load(Load("House-B", 15, 1))
    manager.add_load(Load("Shop-C", 10, 3))
    return GridCommandProcessor(manager)


def test_run_cycle_returns_report_lines(processor):
    result = processor.execute("run-cycle")
    assert result.success
    assert result.command == "run-cycle"
    assert result.lines[0] == "[Log] Total Power: 60.0kW"
    assert result.lines[1] == "[Log] Total Demand: 55.0kW"


def test_show_breakers(processor):
    processor.execute("inject-fault", "House-B")
    result = processor.execute("show-breakers")
    assert result.data == {"Hydro": "OK", "Factory-A": "OK", "House-B": "TRIPPED", "Shop-C": "OK"}
    assert "House-B: TRIPPED" in result.lines


def test_inject_fault_by_position_token(processor):
    result = processor.execute("inject-fault", "L1")
    assert result.success
    assert result.data == "House-B"

    result = processor.execute("inject-fault", "S0")
    assert result.data == "Hydro"
    assert processor.manager.faults.names() == ["House-B", "Hydro"]


def test_inject_fault_twice_reports_no_op(processor):
    processor.execute("inject-fault", "Shop-C")
    result = processor.execute("inject-fault", "Shop-C")
    assert result.success
    assert "already faulted" in result.message


def test_bad_targets_fail_without_raising(processor):
    result = processor.execute("inject-fault", "S4")
    assert not result.success
    assert "index" in result.message

    result = processor.execute("inject-fault", "Unknown-X")
    assert not result.success
    assert "Unknown component" in result.message
    assert len(processor.manager.faults) == 0


def test_resolve_fault_by_position_and_name(processor):
    processor.execute("inject-fault", "Factory-A")
    processor.execute("inject-fault", "Shop-C")

    listed = processor.execute("list-faults")
    assert listed.lines == ["0: Factory-A", "1: Shop-C"]

    result = processor.execute("resolve-fault", "#1")
    assert result.success
    assert result.message == "[Fault] Resolved: Shop-C"

    result = processor.execute("resolve-fault", "Factory-A")
    assert result.success
    assert len(processor.manager.faults) == 0

    result = processor.execute("resolve-fault", "#0")
    assert not result.success


def test_load_connectivity_commands(processor):
    result = processor.execute("disconnect-load", "2")
    assert result.success
    assert result.message == "Load Shop-C disconnected"
    assert not processor.manager.get_load("Shop-C").is_connected()
    assert processor.manager.cycle_count == 1

    processor.execute("reconnect-load", 2)
    assert processor.manager.get_load("Shop-C").is_connected()

    assert not processor.execute("disconnect-load", "9").success
    assert not processor.execute("disconnect-load", "two").success
    assert not processor.execute("disconnect-load").success


def test_source_connectivity_commands(processor):
    assert processor.execute("disconnect-source", "0").success
    assert not processor.manager.get_source("Hydro").is_connected()
    report = processor.execute("run-cycle").data
    assert report.total_power_kw == 0.0
    assert processor.execute("reconnect-source", "0").success


def test_add_load_uses_configured_default_priority(processor):
    result = processor.execute("add-load", "Pump", "12")
    assert result.success
    assert processor.manager.get_load("Pump").priority == 7

    result = processor.execute_line("add-load Fan 4.5 2")
    assert result.success
    fan = processor.manager.get_load("Fan")
    assert fan.demand_kw == 4.5
    assert fan.priority == 2


def test_add_load_rejects_bad_values(processor):
    assert not processor.execute("add-load", "Pump", "lots").success
    assert not processor.execute("add-load", "Pump", "-3").success
    assert not processor.execute("add-load", "Factory-A", "3").success
    assert len(processor.manager.loads) == 3


def test_non_finite_demand_cannot_mask_a_deficit(processor):
    for value in ("nan", "inf"):
        result = processor.execute("add-load", "Bad", value, "1")
        assert not result.success
        assert "Invalid demand" in result.message
    assert not processor.execute("add-source", "Bad", "nan", "fixed").success
    assert len(processor.manager.loads) == 3
    assert len(processor.manager.sources) == 1

    processor.execute("add-load", "Mill", "20", "4")
    report = processor.execute("run-cycle").data
    assert report.deficit
    assert report.shed == ["Mill"]


def test_add_source_types(processor):
    result = processor.execute("add-source", "Solar-1", "0", "1")
    assert result.success
    solar = processor.manager.get_source("Solar-1")
    assert solar.kind == SourceKind.FLUCTUATING
    assert solar.renewable
    assert 20.0 <= solar.output_kw < 50.0

    processor.execute("add-source", "Wind-1", "25", "2")
    wind = processor.manager.get_source("Wind-1")
    assert wind.kind == SourceKind.FIXED
    assert wind.renewable
    assert wind.output_kw == 25.0

    processor.execute("add-source", "Diesel", "15", "4")
    assert not processor.manager.get_source("Diesel").renewable

    result = processor.execute("add-source", "Bad", "10", "plasma")
    assert not result.success


def test_add_source_triggers_cycle(processor):
    cycles = processor.manager.cycle_count
    result = processor.execute("add-source", "Gas", "10", "fixed")
    assert processor.manager.cycle_count == cycles + 1
    assert result.data.total_power_kw == 70.0


def test_reset_breaker_command(processor):
    processor.execute("disconnect-source", "0")
    processor.execute("run-cycle")
    assert processor.manager.breaker("Shop-C").is_tripped()

    assert processor.execute("reset-breaker", "Shop-C").success
    assert not processor.manager.breaker("Shop-C").is_tripped()

    processor.execute("inject-fault", "L0")
    result = processor.execute("reset-breaker", "Factory-A")
    assert not result.success
    assert "fault still active" in result.message


def test_status_command(processor):
    result = processor.execute("status")
    assert result.data['total_loads'] == 3
    assert result.lines[0] == "[Source] Hydro: 60.0kW"
    assert result.lines[1] == "[Load] Factory-A: 30kW, Priority: 2, Connected: Yes"


def test_unknown_and_empty_commands(processor):
    assert not processor.execute("explode").success
    assert not processor.execute_line("   ").success


def test_export_history(processor, tmp_path):
    processor.execute("run-cycle")
    path = tmp_path / "history.csv"
    result = processor.execute("export-history", str(path))
    assert result.success

    frame = pd.read_csv(path)
    assert list(frame['cycle']) == [1, 2]
    assert list(frame['total_power_kw']) == [60.0, 60.0]
