"""
状态看板
========

面向展示层的文字状态（不含任何绘制）：
水流状态、水泵状态摘要与水位状态名称。
"""

from typing import TYPE_CHECKING

from ..config.settings import PumpKind
from ..physics.tower import TowerState

if TYPE_CHECKING:
    from .network import WaterDelivery, WaterSupplyNetwork

FLOW_STATUS = {
    TowerState.EMPTY: "CRITICAL: tower empty!",
    TowerState.LOW: "Low water level",
    TowerState.NORMAL: "Normal operation",
    TowerState.FULL: "Tower full",
}

PUMP_STATUS = {
    TowerState.LOW: "Pumps active",
    TowerState.NORMAL: "Pumps on standby",
    TowerState.FULL: "Pumps off",
}

STATE_NAMES = {
    TowerState.EMPTY: "Empty (CRITICAL!)",
    TowerState.LOW: "Low level",
    TowerState.NORMAL: "Normal",
    TowerState.FULL: "Full",
}


def state_name(state: TowerState) -> str:
    """水位状态显示名称"""
    return STATE_NAMES.get(state, "Unknown")


class StatusBoard:
    """
    状态看板

    订阅水塔状态与供水事件，只读取网络状态，从不修改。
    """

    def __init__(self, network: 'WaterSupplyNetwork'):
        self._network = network
        self.current_state = network.tower.state
        self.flow_status = "Normal flow"
        self.pump_status = "Pumps off"

        network.tower.state_changed.subscribe(self._on_state)
        network.water_delivered.subscribe(self._on_delivery)

    def _on_state(self, state: TowerState) -> None:
        self.current_state = state
        self.flow_status = FLOW_STATUS[state]
        # 排空时保留上一条水泵摘要，由随后的供水事件覆盖
        if state in PUMP_STATUS:
            self.pump_status = PUMP_STATUS[state]

    def _on_delivery(self, delivery: 'WaterDelivery') -> None:
        pump = self._network.get_pump(delivery.pump)
        if pump is None:
            return
        if pump.kind is PumpKind.ELECTRIC:
            condition = "OVERHEAT" if pump.is_overheated else "Active"
            self.pump_status = f"Electric: {condition} ({pump.flow_rate} L/min)"
        else:
            condition = "Running" if pump.is_active else "Inactive"
            self.pump_status = f"Manual: {condition} ({pump.flow_rate} L/min)"
        self.flow_status = "Filling tower"

    @property
    def state_name(self) -> str:
        return state_name(self.current_state)

    def lines(self) -> list:
        """状态面板文本行"""
        tower = self._network.tower
        return [
            "SYSTEM STATUS:",
            f"Tower: {self.state_name}",
            f"Level: {tower.current_volume}/{tower.max_volume} L",
            f"Flow: {self.flow_status}",
            f"Pumps: {self.pump_status}",
        ]


__all__ = [
    'StatusBoard',
    'state_name',
    'FLOW_STATUS',
    'PUMP_STATUS',
    'STATE_NAMES'
]
