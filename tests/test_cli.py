"""
命令行接口测试
"""

import json

from watertower import __version__
from watertower.cli import build_parser, main


class TestCLI:
    """命令行测试"""

    def test_no_command_prints_help(self, capsys):
        """测试无子命令时打印帮助"""
        assert main([]) == 0
        assert "watertower" in capsys.readouterr().out

    def test_version(self, capsys):
        """测试版本命令"""
        assert main(['version']) == 0
        assert __version__ in capsys.readouterr().out

    def test_status(self, capsys):
        """测试状态命令"""
        assert main(['status']) == 0
        out = capsys.readouterr().out
        assert "SYSTEM STATUS:" in out
        assert "Level: 500/1000 L" in out
        assert "electric" in out
        assert "house-2" in out

    def test_run_writes_json(self, tmp_path, capsys):
        """测试运行并导出结果"""
        output = tmp_path / "result.json"
        assert main(['run', '--ticks', '20', '--wiring', 'emergency',
                     '--output', str(output)]) == 0

        assert "仿真结果摘要" in capsys.readouterr().out
        data = json.loads(output.read_text(encoding='utf-8'))
        assert data['ticks'] == 20
        assert data['success'] is True

    def test_invalid_capacity(self):
        """测试无效容积返回错误码"""
        assert main(['run', '--ticks', '1', '--max-volume', '0']) == 2

    def test_parser_defaults(self):
        """测试参数默认值"""
        args = build_parser().parse_args(['run'])
        assert args.ticks == 60
        assert args.wiring == 'subscribed'
        assert args.output is None
