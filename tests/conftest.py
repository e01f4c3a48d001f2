"""
测试公共夹具
"""

import os
import sys
import time

import pytest

# 添加项目路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from watertower.config.settings import (
    ConsumerConfig, NetworkConfig, PumpConfig, PumpKind, PumpWiring,
    SimulationConfig, ThermalConfig, TowerConfig
)
from watertower.physics.tower import WaterTower


class ManualScheduler:
    """确定性调度器：记录延时回调，由测试显式触发"""

    def __init__(self):
        self.pending = []

    def __call__(self, delay, callback):
        self.pending.append((delay, callback))
        return len(self.pending)

    def fire_all(self):
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


def wait_until(predicate, timeout=2.0, interval=0.005):
    """轮询直到条件成立或超时"""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def make_config(pumps=None, consumers=None, wiring=PumpWiring.SUBSCRIBED,
                max_volume=1000, recovery_delay_s=0.1, tick_interval_s=1.0,
                history_size=10000):
    """构造测试用网络配置"""
    return NetworkConfig(
        tower=TowerConfig(max_volume=max_volume),
        thermal=ThermalConfig(recovery_delay_s=recovery_delay_s),
        pumps=pumps if pumps is not None else [
            PumpConfig("manual", PumpKind.MANUAL, 5),
            PumpConfig("electric", PumpKind.ELECTRIC, 250),
        ],
        consumers=consumers if consumers is not None else [
            ConsumerConfig("house-1", 50),
            ConsumerConfig("house-2", 70),
        ],
        simulation=SimulationConfig(
            tick_interval_s=tick_interval_s,
            pump_wiring=wiring,
            history_size=history_size
        )
    )


def drain_scenario_config(**kwargs):
    """单台电动泵 (250) + 两户 (50+70)，仅排空升级驱动水泵"""
    return make_config(
        pumps=[PumpConfig("electric", PumpKind.ELECTRIC, 250)],
        wiring=PumpWiring.EMERGENCY_ONLY,
        **kwargs
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def tower():
    return WaterTower(TowerConfig(max_volume=1000))


@pytest.fixture
def state_log(tower):
    """记录水塔全部状态通知"""
    log = []
    tower.state_changed.subscribe(log.append)
    return log
