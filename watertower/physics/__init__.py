"""
物理模型模块
============

- tower: 水塔（共享蓄水状态与水位状态机）
- consumer: 用水户
"""

from .tower import WaterTower, TowerState, TowerSnapshot, classify_level
from .consumer import Consumer, ConsumerSnapshot

__all__ = [
    'WaterTower',
    'TowerState',
    'TowerSnapshot',
    'classify_level',
    'Consumer',
    'ConsumerSnapshot'
]
