"""
仿真模块
========

- network: 供水网络（显式上下文、接线、排空升级）
- runner: 仿真循环（启停、节拍、批量运行）
- status: 状态看板
"""

from .network import WaterSupplyNetwork, WaterDelivery, NetworkSnapshot
from .runner import LoopState, SimulationLoop, SimulationResult, run_simulation
from .status import StatusBoard, state_name

__all__ = [
    'WaterSupplyNetwork',
    'WaterDelivery',
    'NetworkSnapshot',
    'LoopState',
    'SimulationLoop',
    'SimulationResult',
    'run_simulation',
    'StatusBoard',
    'state_name'
]
