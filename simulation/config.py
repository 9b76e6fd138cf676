"""
Simulation Configuration

Runtime parameters for the grid controller and the logging sinks.
"""

import sys
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from dataclasses_json import dataclass_json
from loguru import logger


@dataclass_json
@dataclass
class GridConfig:
    """Grid controller configuration"""
    seed: Optional[int] = None
    default_priority: int = 5
    fluctuating_min_kw: float = 20.0
    fluctuating_max_kw: float = 50.0
    solar_nominal_kw: float = 50.0
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "10 MB"
    history_limit: Optional[int] = 1000  # None keeps every cycle
    export_dir: str = "outputs"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'GridConfig':
        """Load configuration from a JSON file"""
        with open(path, 'r') as f:
            data = json.load(f)
        logger.info(f"Loaded grid configuration from {path}")
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]):
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            f.write(self.to_json(indent=2))

    def make_rng(self) -> np.random.Generator:
        """Random source for fluctuating output, seeded when a seed is set"""
        return np.random.default_rng(self.seed)


def setup_logging(config: GridConfig):
    """Route loguru output to stderr and, if configured, a rotating file"""
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    if config.log_file:
        logger.add(config.log_file, level="DEBUG", rotation=config.log_rotation)
