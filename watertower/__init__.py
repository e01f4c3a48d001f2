"""
水塔供水网络仿真系统 (Water Tower Supply Network Simulator)
==========================================================

节拍驱动的小型供水网络仿真：一座水塔、若干不同运行策略的水泵、
若干按固定节拍用水的用户，以及将它们耦合起来的事件传播。

模块结构:
- config: 全局配置参数
- core: 事件通道与配置验证
- physics: 水塔与用户
- actuators: 水泵（手动 / 电动热保护）
- simulation: 供水网络、仿真循环、状态看板
- analysis: 运行记录与统计
- cli: 命令行接口
"""

__version__ = "1.0.0"
__author__ = "WaterTower Simulation Team"

from .config.settings import NetworkConfig, PumpKind, PumpWiring
from .physics.tower import WaterTower, TowerState
from .physics.consumer import Consumer
from .actuators.pump import Pump, PumpStatus
from .simulation.network import WaterSupplyNetwork
from .simulation.runner import LoopState, SimulationLoop, SimulationResult, run_simulation
from .analysis.recorder import RunRecorder

__all__ = [
    'NetworkConfig',
    'PumpKind',
    'PumpWiring',
    'WaterTower',
    'TowerState',
    'Consumer',
    'Pump',
    'PumpStatus',
    'WaterSupplyNetwork',
    'LoopState',
    'SimulationLoop',
    'SimulationResult',
    'run_simulation',
    'RunRecorder'
]
