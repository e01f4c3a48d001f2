"""
供水网络仿真核心框架 (Core Framework)
=====================================

核心组件:
---------
1. events - 事件通道（观察者注册表）
2. base_config - 配置验证框架
"""

from .events import EventChannel, Listener
from .base_config import ValidationSeverity, ValidationResult, ConfigValidator

__all__ = [
    # 事件
    'EventChannel',
    'Listener',

    # 配置验证
    'ValidationSeverity',
    'ValidationResult',
    'ConfigValidator'
]
