"""
供水网络
========

显式上下文对象：构造一次，持有水塔、水泵、用户并完成全部接线。

接线顺序（决定同一通知内的处理顺序）:
1. 用户订阅水塔状态
2. 水泵订阅水塔状态（SUBSCRIBED 接线时）
3. 状态看板
4. 排空升级处理：水塔排空时强制更新所有未过热水泵

水泵的供水事件由网络执行实际注水。
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Deque, Dict, List, Optional, Tuple

from ..actuators.pump import Pump, PumpSnapshot, Scheduler
from ..config.settings import NetworkConfig, PumpWiring
from ..core.events import EventChannel
from ..physics.consumer import Consumer, ConsumerSnapshot
from ..physics.tower import TowerSnapshot, TowerState, WaterTower
from .status import StatusBoard

logger = logging.getLogger('WaterTower.Network')


@dataclass(frozen=True)
class WaterDelivery:
    """一次供水"""
    pump: str
    amount: int          # 水泵发出的水量
    accepted: int        # 水塔实际接收的水量 (满水时为0)
    tick: int


@dataclass(frozen=True)
class NetworkSnapshot:
    """网络只读快照"""
    tick: int
    minutes: int
    tower: TowerSnapshot
    pumps: Tuple[PumpSnapshot, ...]
    consumers: Tuple[ConsumerSnapshot, ...]
    flow_status: str
    pump_status: str


class WaterSupplyNetwork:
    """
    供水网络

    所有节拍处理与过热恢复都在 self.lock 下执行。
    """

    def __init__(self, config: Optional[NetworkConfig] = None,
                 scheduler: Optional[Scheduler] = None):
        self.cfg = config or NetworkConfig.default()
        self.cfg.ensure_valid()

        self.lock = threading.RLock()
        self.tick_count = 0
        self.escalation_count = 0

        # 正在注水的水泵 -> 其连锁供水队列
        self._pending: Dict[str, Deque[int]] = {}

        # 事件
        self.ticked: EventChannel[int] = EventChannel("ticked")
        self.water_delivered: EventChannel[WaterDelivery] = EventChannel("water_delivered")
        self.escalated: EventChannel[List[str]] = EventChannel("escalated")

        # 组件
        self.tower = WaterTower(self.cfg.tower)
        self.consumers: List[Consumer] = [
            Consumer.from_config(self.tower, c) for c in self.cfg.consumers
        ]
        self.pumps: List[Pump] = [
            Pump.from_config(p, self.cfg.thermal, lock=self.lock, scheduler=scheduler)
            for p in self.cfg.pumps
        ]

        for pump in self.pumps:
            pump.pumped_water.subscribe(partial(self._deliver, pump))
        if self.cfg.simulation.pump_wiring is PumpWiring.SUBSCRIBED:
            for pump in self.pumps:
                self.tower.state_changed.subscribe(pump.update)

        self.status_board = StatusBoard(self)
        self.tower.state_changed.subscribe(self._on_tower_state)

        logger.info(f"供水网络就绪: {len(self.pumps)} 台水泵, {len(self.consumers)} 户用户, "
                    f"接线 {self.cfg.simulation.pump_wiring.name}")

    @property
    def minutes(self) -> int:
        """仿真时钟 (分钟)"""
        return self.tick_count * self.cfg.simulation.minutes_per_tick

    def get_pump(self, name: str) -> Optional[Pump]:
        for pump in self.pumps:
            if pump.name == name:
                return pump
        return None

    def step(self) -> int:
        """
        推进一个节拍：时钟+1，按固定顺序驱动全部用户

        Returns:
            当前节拍序号
        """
        with self.lock:
            self.tick_count += 1
            logger.debug(f"节拍 {self.tick_count}")
            for consumer in self.consumers:
                consumer.update()
            self.ticked.emit(self.tick_count)
            return self.tick_count

    def _deliver(self, pump: Pump, amount: int) -> None:
        """
        执行注水

        同一水泵在自身注水引起的通知中再次供水时，该水量排队，
        由最外层调用在当前通知分发完成后依次注入，调用栈不随补水次数增长。
        """
        queue = self._pending.get(pump.name)
        if queue is not None:
            queue.append(amount)
            return

        queue = self._pending[pump.name] = deque([amount])
        try:
            while queue:
                self._add_water(pump, queue.popleft())
        finally:
            del self._pending[pump.name]

    def _add_water(self, pump: Pump, amount: int) -> None:
        before = self.tower.current_volume
        self.tower.add_water(amount)
        accepted = self.tower.current_volume - before
        self.water_delivered.emit(WaterDelivery(pump.name, amount, accepted, self.tick_count))

    def _on_tower_state(self, state: TowerState) -> None:
        if state is TowerState.EMPTY:
            self.escalate()

    def escalate(self) -> List[str]:
        """
        排空升级：强制所有未过热水泵以 EMPTY 更新

        Returns:
            被强制更新的水泵名称
        """
        with self.lock:
            self.escalation_count += 1
            logger.info(f"水塔排空 (节拍 {self.tick_count})，强制启动水泵")
            forced = []
            for pump in self.pumps:
                if pump.is_overheated:
                    continue
                forced.append(pump.name)
                pump.update(TowerState.EMPTY)
            self.escalated.emit(forced)
            return forced

    def snapshot(self) -> NetworkSnapshot:
        """获取整网只读快照"""
        with self.lock:
            return NetworkSnapshot(
                tick=self.tick_count,
                minutes=self.minutes,
                tower=self.tower.snapshot(),
                pumps=tuple(p.snapshot() for p in self.pumps),
                consumers=tuple(c.snapshot() for c in self.consumers),
                flow_status=self.status_board.flow_status,
                pump_status=self.status_board.pump_status
            )


__all__ = [
    'WaterDelivery',
    'NetworkSnapshot',
    'WaterSupplyNetwork'
]
