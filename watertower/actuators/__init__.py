"""
执行器仿真模块
==============

水泵运行策略:
- 手动泵（无状态）
- 电动泵（热累积与过热锁定）
"""

from .pump import (
    Pump,
    PumpStatus,
    PumpDecision,
    PumpSnapshot,
    timer_scheduler
)

__all__ = [
    'Pump',
    'PumpStatus',
    'PumpDecision',
    'PumpSnapshot',
    'timer_scheduler'
]
