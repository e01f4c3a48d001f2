"""
全局配置参数
============

供水网络仿真的全部参数：水塔、水泵、用户、热保护与仿真节拍。
默认值与原始演示网络一致（1000 L 水塔、手动泵 + 电动泵、两户用户）。

配置为显式对象，构造网络时逐级传入，不使用模块级可变状态。
"""

from dataclasses import asdict, dataclass, field
from enum import Enum, auto
from typing import Dict, List, Tuple

from ..core.base_config import ConfigValidator, ValidationResult

# 位置标记：仅供展示层使用，核心不解释
Position = Tuple[int, int]


class PumpKind(Enum):
    """水泵类型"""
    MANUAL = "manual"        # 手动泵：无状态
    ELECTRIC = "electric"    # 电动泵：带热保护


class PumpWiring(Enum):
    """水泵接线方式"""
    SUBSCRIBED = auto()      # 订阅水塔全部状态通知
    EMERGENCY_ONLY = auto()  # 仅由水塔排空时的强制升级驱动


@dataclass
class TowerConfig:
    """水塔配置"""
    max_volume: int = 1000           # 最大容积 (L)
    low_ratio: float = 0.2           # 低水位阈值 (容积比, 严格小于)
    full_ratio: float = 0.95         # 满水位阈值 (容积比, 大于等于)

    @property
    def initial_volume(self) -> int:
        """初始容积：最大容积的一半"""
        return self.max_volume // 2

    def validate(self) -> List[ValidationResult]:
        """验证水塔配置"""
        results = [
            ConfigValidator.validate_positive(self.max_volume, "水塔容积"),
            ConfigValidator.validate_range(self.low_ratio, 0.0, 1.0, "低水位比"),
            ConfigValidator.validate_range(self.full_ratio, 0.0, 1.0, "满水位比"),
            ConfigValidator.validate_less_than(self.low_ratio, self.full_ratio,
                                               "低水位比", "满水位比"),
        ]
        return [r for r in results if not r.is_valid]


@dataclass
class ThermalConfig:
    """电动泵热保护配置"""
    heat_increment: int = 10         # 每次运行升温
    cool_decrement: int = 5          # 每次停机降温
    overheat_threshold: int = 100    # 过热阈值 (达到即锁定)
    recovery_delay_s: float = 0.1    # 过热恢复延时 (真实时间, s)

    def validate(self) -> List[ValidationResult]:
        """验证热保护配置"""
        results = [
            ConfigValidator.validate_positive(self.heat_increment, "升温步长"),
            ConfigValidator.validate_positive(self.cool_decrement, "降温步长"),
            ConfigValidator.validate_positive(self.overheat_threshold, "过热阈值"),
            ConfigValidator.validate_positive(self.recovery_delay_s, "恢复延时"),
        ]
        return [r for r in results if not r.is_valid]


@dataclass
class PumpConfig:
    """水泵配置"""
    name: str
    kind: PumpKind
    flow_rate: int                   # 每次运行供水量 (L/min)
    position: Position = (0, 0)

    def validate(self) -> List[ValidationResult]:
        results = [ConfigValidator.validate_positive(self.flow_rate, f"{self.name} 流量")]
        return [r for r in results if not r.is_valid]


@dataclass
class ConsumerConfig:
    """用户配置"""
    name: str
    consumption: int                 # 每个节拍用水量 (L)
    position: Position = (0, 0)

    def validate(self) -> List[ValidationResult]:
        results = [ConfigValidator.validate_positive(self.consumption, f"{self.name} 用水量")]
        return [r for r in results if not r.is_valid]


@dataclass
class SimulationConfig:
    """仿真配置"""
    tick_interval_s: float = 1.0     # 节拍间隔 (真实时间, s)
    minutes_per_tick: int = 1        # 每个节拍对应的仿真分钟数
    pump_wiring: PumpWiring = PumpWiring.SUBSCRIBED
    history_size: int = 10000        # 运行记录缓冲区大小
    verbose: bool = False

    def validate(self) -> List[ValidationResult]:
        results = [
            ConfigValidator.validate_positive(self.tick_interval_s, "节拍间隔"),
            ConfigValidator.validate_positive(self.minutes_per_tick, "节拍分钟数"),
            ConfigValidator.validate_positive(self.history_size, "记录缓冲区"),
        ]
        return [r for r in results if not r.is_valid]


def _default_pumps() -> List[PumpConfig]:
    return [
        PumpConfig("manual", PumpKind.MANUAL, flow_rate=5, position=(100, 450)),
        PumpConfig("electric", PumpKind.ELECTRIC, flow_rate=250, position=(250, 450)),
    ]


def _default_consumers() -> List[ConsumerConfig]:
    return [
        ConsumerConfig("house-1", consumption=50, position=(700, 380)),
        ConsumerConfig("house-2", consumption=70, position=(850, 380)),
    ]


@dataclass
class NetworkConfig:
    """供水网络配置"""
    tower: TowerConfig = field(default_factory=TowerConfig)
    thermal: ThermalConfig = field(default_factory=ThermalConfig)
    pumps: List[PumpConfig] = field(default_factory=_default_pumps)
    consumers: List[ConsumerConfig] = field(default_factory=_default_consumers)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    @classmethod
    def default(cls) -> 'NetworkConfig':
        """原始演示网络"""
        return cls()

    def validate(self) -> List[ValidationResult]:
        """验证全部配置，返回未通过项"""
        results: List[ValidationResult] = []
        results.extend(self.tower.validate())
        results.extend(self.thermal.validate())
        results.extend(self.simulation.validate())
        for pump in self.pumps:
            results.extend(pump.validate())
        for consumer in self.consumers:
            results.extend(consumer.validate())

        names = ConfigValidator.validate_unique(
            [p.name for p in self.pumps] + [c.name for c in self.consumers], "组件名称"
        )
        if not names.is_valid:
            results.append(names)
        return results

    def ensure_valid(self) -> None:
        """验证失败时抛出 ValueError"""
        errors = self.validate()
        if errors:
            raise ValueError("配置无效: " + "; ".join(e.message for e in errors))

    def to_dict(self) -> Dict:
        """导出配置为字典"""
        data = asdict(self)
        data['pumps'] = [dict(p, kind=p['kind'].value) for p in data['pumps']]
        data['simulation']['pump_wiring'] = self.simulation.pump_wiring.name
        return data


__all__ = [
    'Position',
    'PumpKind',
    'PumpWiring',
    'TowerConfig',
    'ThermalConfig',
    'PumpConfig',
    'ConsumerConfig',
    'SimulationConfig',
    'NetworkConfig'
]
