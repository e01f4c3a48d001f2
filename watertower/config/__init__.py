"""
配置模块
========

供水网络仿真的全部配置参数。
"""
from .settings import (
    Position,
    PumpKind,
    PumpWiring,
    TowerConfig,
    ThermalConfig,
    PumpConfig,
    ConsumerConfig,
    SimulationConfig,
    NetworkConfig
)

__all__ = [
    'Position',
    'PumpKind',
    'PumpWiring',
    'TowerConfig',
    'ThermalConfig',
    'PumpConfig',
    'ConsumerConfig',
    'SimulationConfig',
    'NetworkConfig'
]
