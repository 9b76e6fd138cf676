#!/usr/bin/env python3
"""
Tests for the grid manager fault workflow, command validation and status export
"""

import json

import pytest

from grid import (
    DuplicateName, FaultActive, FaultNotActive, InvalidIndex,
    Load, PowerSource, UnknownComponent
)
from simulation import GridConfig, GridManager


@pytest.fixture
def grid():
    """Hydro 60kW feeding three prioritized loads"""
    manager = GridManager(GridConfig(seed=3))
    manager.add_source(PowerSource.fixed("Hydro", 60.0))
    manager.add_load(Load("A", 30, 2))
    manager.add_load(Load("B", 15, 1))
    manager.add_load(Load("C", 10, 3))
    return manager


def test_every_component_gets_one_breaker(grid):
    assert list(grid.breaker_snapshot()) == ["Hydro", "A", "B", "C"]
    assert set(grid.breaker_status().values()) == {"OK"}


def test_add_source_runs_cycle_add_load_does_not():
    manager = GridManager()
    manager.add_load(Load("A", 5))
    assert manager.cycle_count == 0

    report = manager.add_source(PowerSource.fixed("Gen", 10.0))
    assert manager.cycle_count == 1
    assert report.cycle == 1
    assert len(manager.history) == 1


def test_inject_fault_trips_breaker_without_touching_connect_flag(grid):
    assert grid.inject_fault("B")
    report = grid.run_cycle()

    assert report.demand_before_kw == 40.0
    assert report.active_faults == ["B"]
    assert grid.get_load("B").is_connected()
    assert grid.breaker_status()["B"] == "TRIPPED"


def test_inject_fault_is_idempotent(grid):
    assert grid.inject_fault("B")
    faults_once = grid.faults.names()
    snapshot_once = grid.breaker_snapshot()

    assert not grid.inject_fault("B")
    assert grid.faults.names() == faults_once
    assert grid.breaker_snapshot() == snapshot_once


def test_resolve_fault_resets_breaker_and_reruns_cycle(grid):
    grid.inject_fault("B")
    grid.run_cycle()
    cycles = grid.cycle_count

    report = grid.resolve_fault("B")
    assert grid.cycle_count == cycles + 1
    assert "B" not in grid.faults
    assert not grid.breaker("B").is_tripped()
    assert report.demand_before_kw == 55.0
    assert report.active_faults == []


def test_resolving_a_load_fault_can_trigger_shedding():
    manager = GridManager()
    manager.add_source(PowerSource.fixed("Gen", 40.0))
    manager.add_load(Load("A", 30, 2))
    manager.add_load(Load("B", 15, 1))
    manager.inject_fault("A")
    assert manager.run_cycle().shed == []

    report = manager.resolve_fault("A")
    assert report.deficit
    assert report.shed == ["A"]
    assert report.total_demand_kw == 15.0


def test_resolving_a_source_fault_restores_loads():
    manager = GridManager()
    manager.add_source(PowerSource.fixed("Main", 20.0))
    manager.add_source(PowerSource.fixed("Aux", 30.0))
    manager.add_load(Load("A", 30, 1))
    manager.set_load_connectivity(0, False)
    manager.inject_fault("Aux")

    assert manager.run_cycle().reconnected == []

    report = manager.resolve_fault("Aux")
    assert report.total_power_kw == 50.0
    assert report.reconnected == ["A"]


def test_fault_on_source_records_component_type(grid):
    grid.inject_fault("Hydro")
    fault = grid.faults.get("Hydro")
    assert fault.component_type == "source"
    assert fault.injected_at_cycle == grid.cycle_count


def test_unknown_fault_target_is_rejected(grid):
    before = grid.breaker_snapshot()
    with pytest.raises(UnknownComponent):
        grid.inject_fault("Nowhere")
    assert len(grid.faults) == 0
    assert grid.breaker_snapshot() == before


def test_resolve_requires_active_fault(grid):
    cycles = grid.cycle_count
    with pytest.raises(UnknownComponent):
        grid.resolve_fault("Nowhere")
    with pytest.raises(FaultNotActive):
        grid.resolve_fault("A")
    assert grid.cycle_count == cycles


def test_duplicate_names_are_rejected(grid):
    cycles = grid.cycle_count
    with pytest.raises(DuplicateName):
        grid.add_load(Load("A", 99, 9))
    with pytest.raises(DuplicateName):
        grid.add_source(PowerSource.fixed("B", 10.0))

    assert [l.name for l in grid.loads] == ["A", "B", "C"]
    assert grid.get_load("A").demand_kw == 30
    assert len(grid.sources) == 1
    assert grid.cycle_count == cycles


@pytest.mark.parametrize("index", [3, -1, True, "0", 1.0])
def test_invalid_load_index_is_rejected(grid, index):
    with pytest.raises(InvalidIndex):
        grid.set_load_connectivity(index, False)
    assert all(l.is_connected() for l in grid.loads)


def test_invalid_source_index_is_rejected(grid):
    with pytest.raises(InvalidIndex):
        grid.set_source_connectivity(1, False)
    assert grid.get_source("Hydro").is_connected()


def test_manual_connectivity_does_not_touch_breakers(grid):
    grid.inject_fault("A")
    grid.set_load_connectivity(0, False)
    grid.set_load_connectivity(0, True)
    assert grid.get_load("A").is_connected()
    assert grid.breaker("A").is_tripped()


def test_reset_breaker_refused_while_faulted(grid):
    grid.inject_fault("C")
    with pytest.raises(FaultActive):
        grid.reset_breaker("C")
    assert grid.breaker("C").is_tripped()

    with pytest.raises(UnknownComponent):
        grid.reset_breaker("Nowhere")


def test_status_frame_and_summary(grid):
    grid.inject_fault("C")
    frame = grid.status_frame()
    assert list(frame['name']) == ["Hydro", "A", "B", "C"]
    assert list(frame['type']) == ["source", "load", "load", "load"]
    row = frame[frame['name'] == "C"].iloc[0]
    assert row['breaker'] == "TRIPPED"
    assert bool(row['faulted'])

    summary = grid.get_summary()
    assert summary['total_sources'] == 1
    assert summary['total_loads'] == 3
    assert summary['tripped_breakers'] == 1
    assert summary['active_faults'] == ["C"]
    assert summary['connected_demand_kw'] == 55


def test_json_export(grid):
    grid.inject_fault("A")
    data = json.loads(grid.to_json())
    assert data['metadata']['cycles_run'] == grid.cycle_count
    assert data['sources'][0]['kind'] == "fixed"
    assert [l['name'] for l in data['loads']] == ["A", "B", "C"]
    assert data['breakers']['A']['cause'] == "fault"
    assert data['faults'][0]['name'] == "A"
