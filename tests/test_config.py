"""
配置与验证测试
"""

import pytest

from watertower.config.settings import (
    ConsumerConfig, NetworkConfig, PumpConfig, PumpKind, PumpWiring,
    ThermalConfig, TowerConfig
)
from watertower.core.base_config import ConfigValidator, ValidationSeverity


class TestDefaults:
    """默认配置测试"""

    def test_default_layout(self):
        """测试默认网络布局"""
        cfg = NetworkConfig.default()
        assert cfg.tower.max_volume == 1000
        assert cfg.tower.initial_volume == 500
        assert [(p.name, p.kind, p.flow_rate, p.position) for p in cfg.pumps] == [
            ("manual", PumpKind.MANUAL, 5, (100, 450)),
            ("electric", PumpKind.ELECTRIC, 250, (250, 450)),
        ]
        assert [(c.consumption, c.position) for c in cfg.consumers] == [
            (50, (700, 380)),
            (70, (850, 380)),
        ]
        assert cfg.simulation.pump_wiring is PumpWiring.SUBSCRIBED
        assert cfg.simulation.minutes_per_tick == 1

    def test_thermal_defaults(self):
        """测试热保护默认参数"""
        thermal = ThermalConfig()
        assert (thermal.heat_increment, thermal.cool_decrement) == (10, 5)
        assert thermal.overheat_threshold == 100
        assert thermal.recovery_delay_s == pytest.approx(0.1)

    def test_default_is_valid(self):
        """测试默认配置通过验证"""
        assert NetworkConfig.default().validate() == []

    def test_defaults_not_shared(self):
        """测试默认配置实例互不影响"""
        a = NetworkConfig.default()
        b = NetworkConfig.default()
        a.pumps.pop()
        a.tower.max_volume = 10
        assert len(b.pumps) == 2
        assert b.tower.max_volume == 1000

    def test_odd_capacity_initial_volume(self):
        """测试奇数容积的初始值向下取整"""
        assert TowerConfig(max_volume=999).initial_volume == 499

    def test_to_dict(self):
        """测试导出字典"""
        data = NetworkConfig.default().to_dict()
        assert data['tower']['max_volume'] == 1000
        assert data['pumps'][1]['kind'] == "electric"
        assert data['simulation']['pump_wiring'] == "SUBSCRIBED"


class TestValidation:
    """配置验证测试"""

    def test_non_positive_values(self):
        """测试非正数参数"""
        cfg = NetworkConfig(
            tower=TowerConfig(max_volume=0),
            pumps=[PumpConfig("p", PumpKind.MANUAL, 0)],
            consumers=[ConsumerConfig("c", -1)],
        )
        errors = cfg.validate()
        assert len(errors) == 3
        assert all(e.severity is ValidationSeverity.ERROR for e in errors)

    def test_threshold_order(self):
        """测试低水位比必须小于满水位比"""
        errors = TowerConfig(low_ratio=0.9, full_ratio=0.5).validate()
        assert len(errors) == 1

    def test_duplicate_names(self):
        """测试组件名称重复"""
        cfg = NetworkConfig(
            pumps=[PumpConfig("a", PumpKind.MANUAL, 5)],
            consumers=[ConsumerConfig("a", 10)],
        )
        errors = cfg.validate()
        assert len(errors) == 1
        assert "a" in errors[0].message

    def test_ensure_valid_raises(self):
        """测试验证失败抛出 ValueError"""
        cfg = NetworkConfig(tower=TowerConfig(max_volume=-5))
        with pytest.raises(ValueError, match="配置无效"):
            cfg.ensure_valid()


class TestConfigValidator:
    """通用验证规则测试"""

    def test_positive(self):
        assert ConfigValidator.validate_positive(1, "x").is_valid
        result = ConfigValidator.validate_positive(0, "x")
        assert not result.is_valid
        assert result.field_name == "x"

    def test_range(self):
        assert ConfigValidator.validate_range(0.5, 0, 1, "r").is_valid
        assert not ConfigValidator.validate_range(1.5, 0, 1, "r").is_valid

    def test_unique(self):
        assert ConfigValidator.validate_unique(["a", "b"], "n").is_valid
        assert not ConfigValidator.validate_unique(["a", "b", "a"], "n").is_valid
