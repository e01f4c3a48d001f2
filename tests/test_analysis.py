"""
运行记录与分析测试
"""

import numpy as np
import pytest

from watertower.analysis.recorder import EventKind, RunRecorder
from watertower.config.settings import PumpWiring
from watertower.physics.tower import TowerState
from watertower.simulation.network import WaterSupplyNetwork

from conftest import drain_scenario_config, make_config


@pytest.fixture
def drained(scheduler):
    """排空场景运行5个节拍后的网络与记录器"""
    network = WaterSupplyNetwork(drain_scenario_config(), scheduler=scheduler)
    recorder = RunRecorder(network)
    for _ in range(5):
        network.step()
    return network, recorder


class TestRunRecorder:
    """运行记录器测试"""

    def test_volume_series(self, drained):
        """测试容积时间序列"""
        _, recorder = drained
        series = recorder.get_timeseries('volume')

        np.testing.assert_array_equal(series['tick'], [1, 2, 3, 4, 5])
        np.testing.assert_array_equal(series['value'], [380, 260, 140, 20, 180])

        ratio = recorder.get_timeseries('fill_ratio')['value']
        np.testing.assert_allclose(ratio, [0.38, 0.26, 0.14, 0.02, 0.18])

    def test_pump_channels(self, drained):
        """测试水泵通道"""
        _, recorder = drained
        np.testing.assert_array_equal(
            recorder.get_timeseries('heat:electric')['value'], [0, 0, 0, 0, 10]
        )
        np.testing.assert_array_equal(
            recorder.get_timeseries('active_pumps')['value'], [0, 0, 0, 0, 1]
        )

    def test_tick_range(self, drained):
        """测试节拍区间过滤"""
        _, recorder = drained
        series = recorder.get_timeseries('volume', start_tick=2, end_tick=3)
        np.testing.assert_array_equal(series['value'], [260, 140])

    def test_unknown_channel(self, drained):
        """测试未知通道"""
        _, recorder = drained
        with pytest.raises(KeyError):
            recorder.get_timeseries('pressure')

    def test_statistics(self, drained):
        """测试统计信息"""
        _, recorder = drained
        stats = recorder.get_statistics('volume')
        assert stats['min'] == 20
        assert stats['max'] == 380
        assert stats['mean'] == pytest.approx(196.0)

    def test_statistics_empty(self, scheduler):
        """测试无记录时的统计"""
        network = WaterSupplyNetwork(make_config(), scheduler=scheduler)
        stats = RunRecorder(network).get_statistics()
        assert stats == {"min": 0.0, "max": 0.0, "mean": 0.0, "std": 0.0}

    def test_state_histogram(self, drained):
        """测试水位状态分布"""
        _, recorder = drained
        counts = recorder.state_histogram()
        assert counts == {
            TowerState.NORMAL: 2,
            TowerState.LOW: 3,
            TowerState.EMPTY: 0,
            TowerState.FULL: 0,
        }

    def test_escalation_event_order(self, drained):
        """测试排空节拍内的事件顺序"""
        _, recorder = drained
        events = recorder.get_events(start_tick=5, end_tick=5)

        assert [e.kind for e in events] == [
            EventKind.STATE_CHANGE,
            EventKind.STATE_CHANGE,
            EventKind.DELIVERY,
            EventKind.ESCALATION,
            EventKind.STATE_CHANGE,
        ]
        assert [e.message for e in events if e.kind is EventKind.STATE_CHANGE] == [
            "EMPTY", "NORMAL", "LOW"
        ]
        assert events[0].data == {'volume': 0}
        assert events[2].source == "electric"
        assert events[2].data == {'amount': 250, 'accepted': 250}
        assert events[3].data == {'pumps': ["electric"]}

    def test_overheat_and_recovery_events(self, scheduler):
        """测试过热与恢复事件"""
        network = WaterSupplyNetwork(make_config(wiring=PumpWiring.EMERGENCY_ONLY),
                                     scheduler=scheduler)
        recorder = RunRecorder(network)
        electric = network.get_pump("electric")

        for _ in range(10):
            electric.update(TowerState.LOW)
        overheats = recorder.get_events(EventKind.OVERHEAT)
        assert len(overheats) == 1
        assert overheats[0].source == "electric"
        assert overheats[0].data == {'heat': 100}
        assert recorder.get_events(EventKind.RECOVERY) == []

        scheduler.fire_all()
        assert len(recorder.get_events(EventKind.RECOVERY)) == 1

    def test_history_bounded(self, scheduler):
        """测试记录缓冲区有界"""
        network = WaterSupplyNetwork(make_config(history_size=4), scheduler=scheduler)
        recorder = RunRecorder(network)
        for _ in range(10):
            network.step()

        ticks = recorder.get_ticks()
        assert [r.tick for r in ticks] == [7, 8, 9, 10]
        assert len(recorder.get_events()) <= 4

    def test_clear(self, drained):
        """测试清空记录"""
        _, recorder = drained
        recorder.clear()
        assert recorder.get_ticks() == []
        assert recorder.get_events() == []

    def test_event_log_keeps_latest(self, scheduler):
        """测试事件日志溢出后保留最新事件"""
        network = WaterSupplyNetwork(drain_scenario_config(history_size=3), scheduler=scheduler)
        recorder = RunRecorder(network)
        for _ in range(5):
            network.step()

        events = recorder.get_events()
        assert [e.kind for e in events] == [
            EventKind.DELIVERY, EventKind.ESCALATION, EventKind.STATE_CHANGE
        ]
        assert all(e.tick == 5 for e in events)
        assert len(recorder.get_ticks()) == 3

    def test_explicit_buffer_size(self, scheduler):
        """测试显式指定缓冲区大小"""
        network = WaterSupplyNetwork(make_config(), scheduler=scheduler)
        recorder = RunRecorder(network, buffer_size=2)
        for _ in range(5):
            network.step()
        assert [r.tick for r in recorder.get_ticks()] == [4, 5]
