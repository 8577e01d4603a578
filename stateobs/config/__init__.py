"""
Configuration loading for the reconstruction demo.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'default.yaml')


@dataclass
class ReconstructionConfig:
    """Parameters of a simulated IMU attitude reconstruction."""
    kmax: int = 3000
    dt: float = 1e-3

    state_size: int = 18
    measurement_size: int = 6
    input_size: int = 6

    process_noise_std: float = 0.01
    measurement_noise_std: float = 0.01

    input_hold: int = 10
    initial_state_scale: float = 3.14
    seed: Optional[int] = None
    output_path: str = 'trajectory.dat'

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.kmax < 1 or self.input_hold < 1:
            raise ValueError("kmax and input_hold must be at least 1")


def load_config(path: Optional[str] = None, **overrides) -> ReconstructionConfig:
    """
    Load a reconstruction configuration from YAML.

    Args:
        path: YAML file; the packaged default.yaml when None
        **overrides: Values taking precedence over the file

    Returns:
        Reconstruction configuration
    """
    with open(path or DEFAULT_CONFIG_PATH, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    known = {f.name for f in fields(ReconstructionConfig)}
    unknown = (set(data) | set(overrides)) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    config = ReconstructionConfig(**data)
    return replace(config, **overrides) if overrides else config


__all__ = ['ReconstructionConfig', 'load_config', 'DEFAULT_CONFIG_PATH']
