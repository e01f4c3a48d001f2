"""
运行记录器
==========

订阅供水网络，按节拍记录时间序列并保存事件日志:
- 有界历史（deque，内存，不落盘）
- numpy 时间序列查询
- 统计信息
"""

import numpy as np
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Optional, Tuple

from ..physics.tower import TowerState

if TYPE_CHECKING:
    from ..actuators.pump import Pump
    from ..simulation.network import WaterDelivery, WaterSupplyNetwork


class EventKind(Enum):
    """事件类型"""
    STATE_CHANGE = auto()   # 水塔状态通知
    DELIVERY = auto()       # 供水
    OVERHEAT = auto()       # 过热锁定
    RECOVERY = auto()       # 过热恢复
    ESCALATION = auto()     # 排空升级


@dataclass(frozen=True)
class TickRecord:
    """节拍记录"""
    tick: int
    minutes: int
    volume: int
    state: TowerState
    active_pumps: Tuple[str, ...]
    heat_levels: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class EventRecord:
    """事件记录"""
    tick: int
    kind: EventKind
    source: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


class RunRecorder:
    """
    运行记录器

    通道:
    - volume: 水塔容积
    - fill_ratio: 充满度
    - active_pumps: 运行中水泵数
    - heat:<水泵名>: 电动泵热累积
    """

    def __init__(self, network: 'WaterSupplyNetwork', buffer_size: Optional[int] = None):
        self.network = network
        self.buffer_size = buffer_size or network.cfg.simulation.history_size

        # 有界历史：超出容量时丢弃最早的记录
        self.tick_buffer: Deque[TickRecord] = deque(maxlen=self.buffer_size)
        self.event_buffer: Deque[EventRecord] = deque(maxlen=self.buffer_size)

        network.ticked.subscribe(self._on_tick)
        network.tower.state_changed.subscribe(self._on_state, first=True)
        network.water_delivered.subscribe(self._on_delivery)
        network.escalated.subscribe(self._on_escalation)
        for pump in network.pumps:
            pump.overheated.subscribe(self._on_overheat)
            pump.recovered.subscribe(self._on_recovery)

    # ------------------------------------------------------------------
    # 订阅回调
    # ------------------------------------------------------------------
    def _log(self, kind: EventKind, source: str, message: str, **data):
        self.event_buffer.append(EventRecord(
            tick=self.network.tick_count,
            kind=kind,
            source=source,
            message=message,
            data=data
        ))

    def _on_tick(self, tick: int):
        net = self.network
        self.tick_buffer.append(TickRecord(
            tick=tick,
            minutes=net.minutes,
            volume=net.tower.current_volume,
            state=net.tower.state,
            active_pumps=tuple(p.name for p in net.pumps if p.is_active),
            heat_levels={p.name: p.heat_level for p in net.pumps}
        ))

    def _on_state(self, state: TowerState):
        self._log(EventKind.STATE_CHANGE, "tower", state.name,
                  volume=self.network.tower.current_volume)

    def _on_delivery(self, delivery: 'WaterDelivery'):
        self._log(EventKind.DELIVERY, delivery.pump, f"供水 {delivery.accepted}/{delivery.amount} L",
                  amount=delivery.amount, accepted=delivery.accepted)

    def _on_escalation(self, forced: List[str]):
        self._log(EventKind.ESCALATION, "network", "水塔排空，强制启动水泵", pumps=list(forced))

    def _on_overheat(self, pump: 'Pump'):
        self._log(EventKind.OVERHEAT, pump.name, "过热锁定", heat=pump.heat_level)

    def _on_recovery(self, pump: 'Pump'):
        self._log(EventKind.RECOVERY, pump.name, "过热恢复")

    # ------------------------------------------------------------------
    # 查询接口
    # ------------------------------------------------------------------
    def get_ticks(self, start_tick: Optional[int] = None,
                  end_tick: Optional[int] = None) -> List[TickRecord]:
        """获取节拍记录 (闭区间)"""
        records = list(self.tick_buffer)
        if start_tick is not None:
            records = [r for r in records if r.tick >= start_tick]
        if end_tick is not None:
            records = [r for r in records if r.tick <= end_tick]
        return records

    def get_events(self, kind: Optional[EventKind] = None,
                   start_tick: Optional[int] = None,
                   end_tick: Optional[int] = None) -> List[EventRecord]:
        """获取事件记录"""
        events = list(self.event_buffer)
        if kind is not None:
            events = [e for e in events if e.kind == kind]
        if start_tick is not None:
            events = [e for e in events if e.tick >= start_tick]
        if end_tick is not None:
            events = [e for e in events if e.tick <= end_tick]
        return events

    @staticmethod
    def _check_channel(channel: str) -> None:
        if channel not in ('volume', 'fill_ratio', 'active_pumps') and not channel.startswith('heat:'):
            raise KeyError(f"未知通道: {channel}")

    def _channel_value(self, record: TickRecord, channel: str) -> float:
        if channel == 'volume':
            return record.volume
        if channel == 'fill_ratio':
            return record.volume / self.network.tower.max_volume
        if channel == 'active_pumps':
            return len(record.active_pumps)
        if channel.startswith('heat:'):
            return record.heat_levels.get(channel[5:], 0)
        raise KeyError(f"未知通道: {channel}")

    def get_timeseries(self, channel: str = 'volume',
                       start_tick: Optional[int] = None,
                       end_tick: Optional[int] = None) -> Dict[str, np.ndarray]:
        """
        获取时间序列

        Returns:
            {'tick': 节拍数组, 'value': 通道值数组}
        """
        self._check_channel(channel)
        records = self.get_ticks(start_tick, end_tick)
        ticks = np.array([r.tick for r in records], dtype=int)
        values = np.array([self._channel_value(r, channel) for r in records], dtype=float)
        return {'tick': ticks, 'value': values}

    def get_statistics(self, channel: str = 'volume',
                       start_tick: Optional[int] = None,
                       end_tick: Optional[int] = None) -> Dict[str, float]:
        """获取统计信息"""
        values = self.get_timeseries(channel, start_tick, end_tick)['value']
        if len(values) == 0:
            return {"min": 0.0, "max": 0.0, "mean": 0.0, "std": 0.0}
        return {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "std": float(np.std(values))
        }

    def state_histogram(self, start_tick: Optional[int] = None,
                        end_tick: Optional[int] = None) -> Dict[TowerState, int]:
        """各水位状态停留的节拍数"""
        counts = {state: 0 for state in TowerState}
        for record in self.get_ticks(start_tick, end_tick):
            counts[record.state] += 1
        return counts

    def clear(self):
        """清空记录"""
        self.tick_buffer.clear()
        self.event_buffer.clear()


__all__ = [
    'EventKind',
    'TickRecord',
    'EventRecord',
    'RunRecorder'
]
