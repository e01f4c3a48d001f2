"""
水塔模型
========

供水网络唯一的共享蓄水状态:
- 整数容积，始终夹在 [0, 最大容积] 内
- 水位类别由容积纯函数导出，不可直接设置
- 每次成功变更后同步通知全部订阅者（不去重）
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ..config.settings import TowerConfig
from ..core.events import EventChannel

logger = logging.getLogger('WaterTower.Tower')


class TowerState(Enum):
    """水塔水位状态"""
    NORMAL = auto()     # 正常
    LOW = auto()        # 低水位
    EMPTY = auto()      # 排空
    FULL = auto()       # 满水位


@dataclass(frozen=True)
class TowerSnapshot:
    """水塔只读快照"""
    current_volume: int
    max_volume: int
    state: TowerState

    @property
    def fill_ratio(self) -> float:
        """充满度 (0~1)"""
        return self.current_volume / self.max_volume if self.max_volume else 0.0


def classify_level(volume: int, max_volume: int,
                   low_ratio: float = 0.2, full_ratio: float = 0.95) -> TowerState:
    """
    水位分类（按顺序匹配，首个命中生效）

    1. volume == 0               -> EMPTY
    2. volume <  low * max       -> LOW
    3. volume >= full * max      -> FULL
    4. 其余                      -> NORMAL
    """
    if volume == 0:
        return TowerState.EMPTY
    if volume < max_volume * low_ratio:
        return TowerState.LOW
    if volume >= max_volume * full_ratio:
        return TowerState.FULL
    return TowerState.NORMAL


class WaterTower:
    """
    水塔

    仅通过 consume / add_water 两个入口变更容积。
    超量取水与超量注水都静默夹紧，不抛异常。
    """

    def __init__(self, config: Optional[TowerConfig] = None):
        self.cfg = config or TowerConfig()
        self._max_volume = int(self.cfg.max_volume)
        self._volume = self.cfg.initial_volume

        # 状态变更事件: payload = TowerState
        self.state_changed: EventChannel[TowerState] = EventChannel("state_changed")

    @property
    def max_volume(self) -> int:
        return self._max_volume

    @property
    def current_volume(self) -> int:
        return self._volume

    @property
    def state(self) -> TowerState:
        """当前水位状态（由容积导出）"""
        return classify_level(self._volume, self._max_volume,
                              self.cfg.low_ratio, self.cfg.full_ratio)

    @property
    def is_full(self) -> bool:
        return self._volume >= self._max_volume

    def consume(self, amount: int) -> None:
        """取水，容积不低于0"""
        self._volume = max(0, self._volume - amount)
        self._publish()

    def add_water(self, amount: int) -> None:
        """注水，已满时为空操作（不发通知）"""
        if self._volume < self._max_volume:
            self._volume = min(self._max_volume, self._volume + amount)
            self._publish()

    def _publish(self) -> None:
        state = self.state
        logger.debug(f"容积 {self._volume}/{self._max_volume} -> {state.name}")
        self.state_changed.emit(state)

    def snapshot(self) -> TowerSnapshot:
        """获取只读快照"""
        return TowerSnapshot(
            current_volume=self._volume,
            max_volume=self._max_volume,
            state=self.state
        )

    def __repr__(self) -> str:
        return f"WaterTower({self._volume}/{self._max_volume}, {self.state.name})"


__all__ = [
    'TowerState',
    'TowerSnapshot',
    'WaterTower',
    'classify_level'
]
