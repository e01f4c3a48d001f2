"""
仿真运行器
==========

节拍驱动的仿真循环:
- STOPPED / RUNNING 两态，对外提供启停切换
- 后台线程按固定真实时间间隔推进节拍
- 同步批量运行，生成仿真结果

停止循环不会取消已调度的过热恢复。
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

import numpy as np

from ..analysis.recorder import EventKind, RunRecorder
from ..config.settings import SimulationConfig
from ..physics.tower import TowerState
from .network import NetworkSnapshot, WaterSupplyNetwork

logger = logging.getLogger('WaterTower.Loop')


class LoopState(Enum):
    """循环状态"""
    STOPPED = auto()
    RUNNING = auto()


@dataclass
class SimulationResult:
    """仿真结果"""
    success: bool
    ticks: int                      # 本次运行节拍数
    start_tick: int
    end_tick: int
    duration_s: float               # 实际耗时 (s)

    # 最终状态
    final: NetworkSnapshot

    # 时间序列
    volume: np.ndarray

    # 统计
    state_counts: Dict[TowerState, int] = field(default_factory=dict)
    deliveries: int = 0
    delivered_volume: int = 0
    overheats: int = 0
    recoveries: int = 0
    escalations: int = 0

    errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """生成摘要"""
        tower = self.final.tower
        lines = [
            f"仿真结果摘要",
            f"=" * 40,
            f"状态: {'成功 ✓' if self.success else '失败 ✗'}",
            f"节拍: {self.start_tick} - {self.end_tick} ({self.ticks} 步)",
            f"仿真时钟: {self.final.minutes} min",
            f"耗时: {self.duration_s:.3f}s",
            f"水塔: {tower.current_volume}/{tower.max_volume} L ({tower.state.name})",
        ]

        if len(self.volume):
            lines.append(f"容积: 均值 {np.mean(self.volume):.1f} "
                         f"[{np.min(self.volume):.0f}, {np.max(self.volume):.0f}]")

        lines.append(f"\n水位分布:")
        for state, count in self.state_counts.items():
            lines.append(f"  - {state.name}: {count}")

        lines.append(f"\n供水次数: {self.deliveries} (共 {self.delivered_volume} L)")
        lines.append(f"排空升级: {self.escalations}")
        lines.append(f"过热/恢复: {self.overheats}/{self.recoveries}")

        for pump in self.final.pumps:
            heat = f", 热量 {pump.heat_level}" if pump.heat_level is not None else ""
            lines.append(f"  {pump.name}: {pump.status.value}{heat}")

        if self.errors:
            lines.append(f"\n错误 ({len(self.errors)}):")
            for e in self.errors[:3]:
                lines.append(f"  ❌ {e}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """导出为可序列化字典"""
        tower = self.final.tower
        return {
            'success': self.success,
            'ticks': self.ticks,
            'start_tick': self.start_tick,
            'end_tick': self.end_tick,
            'duration_s': self.duration_s,
            'minutes': self.final.minutes,
            'tower': {
                'current_volume': tower.current_volume,
                'max_volume': tower.max_volume,
                'state': tower.state.name,
            },
            'pumps': [
                {
                    'name': p.name,
                    'kind': p.kind.value,
                    'status': p.status.value,
                    'is_active': p.is_active,
                    'is_overheated': p.is_overheated,
                    'heat_level': p.heat_level,
                }
                for p in self.final.pumps
            ],
            'volume': self.volume.tolist(),
            'state_counts': {s.name: c for s, c in self.state_counts.items()},
            'deliveries': self.deliveries,
            'delivered_volume': self.delivered_volume,
            'overheats': self.overheats,
            'recoveries': self.recoveries,
            'escalations': self.escalations,
            'errors': list(self.errors),
        }


class SimulationLoop:
    """
    仿真循环

    控制面: start / stop / toggle
    节拍: tick() 单步，run() 同步批量运行
    """

    def __init__(self, network: Optional[WaterSupplyNetwork] = None,
                 config: Optional[SimulationConfig] = None):
        self.network = network or WaterSupplyNetwork()
        self.cfg = config or self.network.cfg.simulation
        self.recorder = RunRecorder(self.network, self.cfg.history_size)

        self.state = LoopState.STOPPED
        self.last_error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self.state is LoopState.RUNNING

    def start(self) -> None:
        """启动后台节拍线程"""
        if self.is_running:
            return
        self.state = LoopState.RUNNING
        self.last_error = None
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._tick_loop, name="watertower-loop", daemon=True)
        self._thread.start()
        logger.info("仿真循环启动")

    def stop(self) -> None:
        """停止后台节拍线程（不取消过热恢复定时器）"""
        self.state = LoopState.STOPPED
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        logger.info("仿真循环停止")

    def toggle(self) -> LoopState:
        """切换启停"""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.state

    def tick(self) -> int:
        """推进一个节拍"""
        return self.network.step()

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(self.cfg.tick_interval_s):
            try:
                tick = self.tick()
            except Exception as e:
                logger.exception(f"节拍处理失败: {e}")
                self.last_error = e
                self.state = LoopState.STOPPED
                break

            if self.cfg.verbose:
                tower = self.network.tower
                logger.info(f"[t={self.network.minutes}min] 节拍 {tick}: "
                            f"{tower.current_volume}/{tower.max_volume} L {tower.state.name}")

    def run(self, ticks: int) -> SimulationResult:
        """
        同步运行指定节拍数

        Parameters:
            ticks: 节拍数

        Returns:
            SimulationResult: 仿真结果
        """
        wall_start = time.time()
        start_tick = self.network.tick_count + 1
        errors: List[str] = []

        try:
            for _ in range(ticks):
                self.tick()
        except Exception as e:
            logger.exception(f"仿真运行错误: {e}")
            errors.append(f"Simulation error at tick={self.network.tick_count}: {e}")

        end_tick = self.network.tick_count
        return self._build_result(start_tick, end_tick, time.time() - wall_start, errors)

    def _build_result(self, start_tick: int, end_tick: int, duration_s: float,
                      errors: List[str]) -> SimulationResult:
        rec = self.recorder
        deliveries = rec.get_events(EventKind.DELIVERY, start_tick, end_tick)

        return SimulationResult(
            success=not errors,
            ticks=max(0, end_tick - start_tick + 1),
            start_tick=start_tick,
            end_tick=end_tick,
            duration_s=duration_s,
            final=self.network.snapshot(),
            volume=rec.get_timeseries('volume', start_tick, end_tick)['value'],
            state_counts=rec.state_histogram(start_tick, end_tick),
            deliveries=len(deliveries),
            delivered_volume=sum(e.data['accepted'] for e in deliveries),
            overheats=len(rec.get_events(EventKind.OVERHEAT, start_tick, end_tick)),
            recoveries=len(rec.get_events(EventKind.RECOVERY, start_tick, end_tick)),
            escalations=len(rec.get_events(EventKind.ESCALATION, start_tick, end_tick)),
            errors=errors
        )


def run_simulation(ticks: int, config=None, scheduler=None) -> SimulationResult:
    """
    便捷函数: 构建网络并同步运行

    Parameters:
        ticks: 节拍数
        config: 网络配置 (默认为原始演示网络)
        scheduler: 过热恢复调度器

    Returns:
        SimulationResult
    """
    network = WaterSupplyNetwork(config, scheduler=scheduler)
    return SimulationLoop(network).run(ticks)


__all__ = [
    'LoopState',
    'SimulationResult',
    'SimulationLoop',
    'run_simulation'
]
