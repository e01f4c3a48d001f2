"""
用户（用水户）模型
==================

每个节拍从水塔取固定水量；水塔排空时停止取水。
可否取水仅由最近一次收到的水塔状态决定。
"""

from dataclasses import dataclass
from typing import Optional

from ..config.settings import ConsumerConfig, Position
from .tower import TowerState, WaterTower


@dataclass(frozen=True)
class ConsumerSnapshot:
    """用户只读快照"""
    name: str
    position: Position
    consumption: int
    can_consume: bool


class Consumer:
    """
    用水户

    构造时绑定唯一水塔并订阅其状态通知。
    同一节拍内排在后面的用户会看到前面用户引起的状态变化。
    """

    def __init__(self, tower: WaterTower, consumption: int,
                 position: Position = (0, 0), name: Optional[str] = None):
        self.name = name or f"consumer@{position}"
        self.position = position
        self._tower = tower
        self._consumption = int(consumption)
        self._can_consume = True

        tower.state_changed.subscribe(self._on_tower_state)

    @classmethod
    def from_config(cls, tower: WaterTower, cfg: ConsumerConfig) -> 'Consumer':
        return cls(tower, cfg.consumption, cfg.position, cfg.name)

    @property
    def consumption(self) -> int:
        return self._consumption

    @property
    def can_consume(self) -> bool:
        return self._can_consume

    def _on_tower_state(self, state: TowerState) -> None:
        self._can_consume = state != TowerState.EMPTY

    def update(self) -> None:
        """推进一个节拍"""
        if self._can_consume:
            self._tower.consume(self._consumption)

    def snapshot(self) -> ConsumerSnapshot:
        return ConsumerSnapshot(
            name=self.name,
            position=self.position,
            consumption=self._consumption,
            can_consume=self._can_consume
        )


__all__ = [
    'Consumer',
    'ConsumerSnapshot'
]
