"""
分析模块
========

- recorder: 运行记录（节拍时间序列 + 事件日志）
"""

from .recorder import EventKind, TickRecord, EventRecord, RunRecorder

__all__ = [
    'EventKind',
    'TickRecord',
    'EventRecord',
    'RunRecorder'
]
