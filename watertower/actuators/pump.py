"""
水泵执行器模型
==============

两类运行策略:
- 手动泵: 水塔低水位或排空时运行，无记忆
- 电动泵: 同样的启停规则 + 热累积；过热后锁定，
  经过固定真实时间延时后自动恢复

水泵从不直接向水塔注水，只发出"供水"事件，
由上层订阅者执行实际注水。
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..config.settings import PumpConfig, PumpKind, Position, ThermalConfig
from ..core.events import EventChannel
from ..physics.tower import TowerState

logger = logging.getLogger('WaterTower.Pump')

# 延时调度器: (延时秒数, 回调) -> 句柄
Scheduler = Callable[[float, Callable[[], None]], Any]


class PumpStatus(Enum):
    """水泵状态标签"""
    IDLE = "Inactive"
    RUNNING = "Running"
    OVERHEATED = "Overheated"


@dataclass(frozen=True)
class PumpDecision:
    """单次更新的决策结果"""
    is_active: bool
    status: PumpStatus
    emitted_flow: int = 0        # 本次发出的供水量 (0 = 不供水)
    ignored: bool = False        # 过热锁定期间忽略输入


@dataclass(frozen=True)
class PumpSnapshot:
    """水泵只读快照"""
    name: str
    kind: PumpKind
    position: Position
    is_active: bool
    status: PumpStatus
    flow_rate: int
    is_overheated: bool = False
    heat_level: Optional[int] = None   # 仅电动泵


def needs_water(state: TowerState) -> bool:
    """水塔是否需要补水"""
    return state in (TowerState.LOW, TowerState.EMPTY)


def _running_decision(pump: 'Pump', state: TowerState) -> PumpDecision:
    active = needs_water(state)
    return PumpDecision(
        is_active=active,
        status=PumpStatus.RUNNING if active else PumpStatus.IDLE,
        emitted_flow=pump.flow_rate if active else 0
    )


def manual_policy(pump: 'Pump', state: TowerState) -> PumpDecision:
    """手动泵: 仅由水塔状态决定"""
    return _running_decision(pump, state)


def electric_policy(pump: 'Pump', state: TowerState) -> PumpDecision:
    """电动泵: 过热锁定期间完全忽略输入"""
    if pump.is_overheated:
        return PumpDecision(is_active=False, status=PumpStatus.OVERHEATED, ignored=True)
    return _running_decision(pump, state)


POLICIES: Dict[PumpKind, Callable[['Pump', TowerState], PumpDecision]] = {
    PumpKind.MANUAL: manual_policy,
    PumpKind.ELECTRIC: electric_policy,
}


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """使用守护线程定时器调度回调"""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class Pump:
    """
    水泵

    特性:
    - 按类型查表选择运行策略
    - 供水事件为水回到水塔的唯一途径
    - 电动泵热累积、过热锁定与定时恢复

    update() 与过热恢复共用同一把可重入锁，
    保证恢复回调与节拍处理串行执行。
    """

    def __init__(self, kind: PumpKind, flow_rate: int,
                 position: Position = (0, 0), name: Optional[str] = None,
                 thermal: Optional[ThermalConfig] = None,
                 lock: Optional[threading.RLock] = None,
                 scheduler: Optional[Scheduler] = None):
        if kind not in POLICIES:
            raise ValueError(f"未知水泵类型: {kind}")
        if flow_rate <= 0:
            raise ValueError(f"水泵流量必须为正数，当前值: {flow_rate}")

        self.kind = kind
        self.name = name or kind.value
        self.position = position
        self._flow_rate = int(flow_rate)
        self.thermal = thermal or ThermalConfig()

        # 状态
        self.is_active = False
        self.status = PumpStatus.IDLE

        # 热保护 (仅电动泵使用)
        self.heat_level = 0
        self.is_overheated = False
        self.overheat_count = 0
        self._recovery_handle: Any = None

        # 并发
        self._lock = lock or threading.RLock()
        self._scheduler = scheduler or timer_scheduler

        # 事件
        self.pumped_water: EventChannel[int] = EventChannel("pumped_water")
        self.overheated: EventChannel['Pump'] = EventChannel("overheated")
        self.recovered: EventChannel['Pump'] = EventChannel("recovered")

    @classmethod
    def from_config(cls, cfg: PumpConfig, thermal: Optional[ThermalConfig] = None,
                    lock: Optional[threading.RLock] = None,
                    scheduler: Optional[Scheduler] = None) -> 'Pump':
        return cls(cfg.kind, cfg.flow_rate, cfg.position, cfg.name,
                   thermal=thermal, lock=lock, scheduler=scheduler)

    @classmethod
    def manual(cls, flow_rate: int, position: Position = (0, 0), **kwargs) -> 'Pump':
        """创建手动泵"""
        return cls(PumpKind.MANUAL, flow_rate, position, **kwargs)

    @classmethod
    def electric(cls, flow_rate: int, position: Position = (0, 0), **kwargs) -> 'Pump':
        """创建电动泵"""
        return cls(PumpKind.ELECTRIC, flow_rate, position, **kwargs)

    @property
    def flow_rate(self) -> int:
        return self._flow_rate

    @property
    def recovery_pending(self) -> bool:
        """是否有待执行的过热恢复"""
        return self._recovery_handle is not None

    def update(self, state: TowerState) -> PumpDecision:
        """
        响应水塔状态

        Parameters:
            state: 水塔当前状态

        Returns:
            PumpDecision: 针对本次通知作出的决策（供水连锁发生之前）。
            连锁中的内层更新可能随后停机或锁定水泵，
            最终状态以 is_active / status 属性为准。
        """
        with self._lock:
            decision = POLICIES[self.kind](self, state)
            self.status = decision.status
            if decision.ignored:
                return decision

            self.is_active = decision.is_active
            if decision.emitted_flow:
                self.pumped_water.emit(decision.emitted_flow)

            if self.kind is PumpKind.ELECTRIC:
                self._update_heat(decision.is_active)
            return decision

    def _update_heat(self, was_active: bool) -> None:
        """热累积：运行升温、停机降温"""
        if self.is_overheated:
            # 供水事件的连锁更新中已锁定
            return

        cfg = self.thermal
        if was_active:
            self.heat_level = min(cfg.overheat_threshold, self.heat_level + cfg.heat_increment)
            if self.heat_level >= cfg.overheat_threshold:
                self._latch_overheat()
        else:
            self.heat_level = max(0, self.heat_level - cfg.cool_decrement)

    def _latch_overheat(self) -> None:
        self.is_overheated = True
        self.is_active = False
        self.status = PumpStatus.OVERHEATED
        self.overheat_count += 1
        logger.warning(f"{self.name} 过热锁定，{self.thermal.recovery_delay_s}s 后恢复")

        self._recovery_handle = self._scheduler(self.thermal.recovery_delay_s, self._recover)
        self.overheated.emit(self)

    def _recover(self) -> None:
        """过热恢复（在定时器线程中执行）"""
        with self._lock:
            self.heat_level = 0
            self.is_overheated = False
            self.status = PumpStatus.IDLE
            self._recovery_handle = None
            logger.info(f"{self.name} 过热恢复")
            self.recovered.emit(self)

    def snapshot(self) -> PumpSnapshot:
        """获取只读快照"""
        with self._lock:
            electric = self.kind is PumpKind.ELECTRIC
            return PumpSnapshot(
                name=self.name,
                kind=self.kind,
                position=self.position,
                is_active=self.is_active,
                status=self.status,
                flow_rate=self._flow_rate,
                is_overheated=self.is_overheated,
                heat_level=self.heat_level if electric else None
            )

    def __repr__(self) -> str:
        return f"Pump({self.name!r}, {self.kind.name}, {self.status.value})"


__all__ = [
    'PumpStatus',
    'PumpDecision',
    'PumpSnapshot',
    'Pump',
    'POLICIES',
    'Scheduler',
    'needs_water',
    'manual_policy',
    'electric_policy',
    'timer_scheduler'
]
