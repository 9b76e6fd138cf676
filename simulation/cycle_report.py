"""
Cycle Reporting

Structured results of each simulation cycle and a bounded history that
exports to pandas / CSV / JSON.
"""

import json
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd
from loguru import logger

from simulation.load_balancer import BalancingAction


@dataclass
class SourceReading:
    """Output of one source during a cycle"""
    name: str
    output_kw: float
    connected: bool
    counted: bool  # contributed to total power


@dataclass
class CycleReport:
    """Outcome of one balancing cycle"""
    cycle: int
    total_power_kw: float
    demand_before_kw: float
    total_demand_kw: float
    deficit: bool
    source_readings: List[SourceReading] = field(default_factory=list)
    actions: List[BalancingAction] = field(default_factory=list)
    active_faults: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def shed(self) -> List[str]:
        return [a.target for a in self.actions if a.type == 'load_shed']

    @property
    def reconnected(self) -> List[str]:
        return [a.target for a in self.actions if a.type == 'reconnect']

    @property
    def margin_kw(self) -> float:
        return self.total_power_kw - self.total_demand_kw

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cycle': self.cycle,
            'created_at': self.created_at,
            'total_power_kw': self.total_power_kw,
            'demand_before_kw': self.demand_before_kw,
            'total_demand_kw': self.total_demand_kw,
            'deficit': self.deficit,
            'source_readings': [vars(r) for r in self.source_readings],
            'actions': [a.to_dict() for a in self.actions],
            'active_faults': list(self.active_faults)
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def log_lines(self) -> List[str]:
        """Operator-facing summary, one line per event"""
        lines = [f"[Log] Total Power: {self.total_power_kw:.1f}kW",
                 f"[Log] Total Demand: {self.demand_before_kw:.1f}kW"]
        if self.deficit:
            lines.append("[Warning] Power Deficit Detected. Tripping loads based on priority.")
        for name in self.shed:
            lines.append(f"[Trip] Load {name} tripped due to overload.")
        for name in self.reconnected:
            lines.append(f"[Reconnect] Load {name} reconnected.")
        for name in self.active_faults:
            lines.append(f"[Log] Active Fault: {name}")
        return lines


class CycleHistory:
    """Bounded record of past cycles"""

    def __init__(self, limit: Optional[int] = None):
        self._reports = deque(maxlen=limit)

    def append(self, report: CycleReport):
        self._reports.append(report)

    @property
    def last(self) -> Optional[CycleReport]:
        return self._reports[-1] if self._reports else None

    def __len__(self) -> int:
        return len(self._reports)

    def __iter__(self):
        return iter(list(self._reports))

    def to_frame(self) -> pd.DataFrame:
        """One row per cycle"""
        columns = ['cycle', 'created_at', 'total_power_kw', 'demand_before_kw', 'total_demand_kw',
                   'margin_kw', 'deficit', 'loads_shed', 'loads_reconnected', 'active_faults',
                   'mean_source_output_kw']
        rows = []
        for report in self._reports:
            outputs = np.array([r.output_kw for r in report.source_readings if r.counted])
            rows.append({
                'cycle': report.cycle,
                'created_at': report.created_at,
                'total_power_kw': report.total_power_kw,
                'demand_before_kw': report.demand_before_kw,
                'total_demand_kw': report.total_demand_kw,
                'margin_kw': report.margin_kw,
                'deficit': report.deficit,
                'loads_shed': len(report.shed),
                'loads_reconnected': len(report.reconnected),
                'active_faults': len(report.active_faults),
                'mean_source_output_kw': float(outputs.mean()) if outputs.size else 0.0
            })
        return pd.DataFrame(rows, columns=columns)

    def export_csv(self, path: Union[str, Path]) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(output_path, index=False)
        logger.info(f"Cycle history exported to {output_path}")
        return output_path

    def save_reports(self, output_dir: Union[str, Path]) -> Path:
        """Write each report to JSON plus an index file"""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        index = []
        for report in self._reports:
            report_file = output_path / f"cycle_{report.cycle:05d}.json"
            with open(report_file, 'w') as f:
                f.write(report.to_json())
            index.append({
                'cycle': report.cycle,
                'created_at': report.created_at,
                'deficit': report.deficit,
                'file': report_file.name
            })

        index_file = output_path / "cycles_index.json"
        with open(index_file, 'w') as f:
            json.dump(index, f, indent=2)

        logger.info(f"Saved {len(index)} cycle reports to {output_path}")
        return index_file
