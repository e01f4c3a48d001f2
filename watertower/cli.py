#!/usr/bin/env python3
"""
水塔供水网络仿真命令行接口
==========================

用法:
    python -m watertower.cli run [--ticks N] [--wiring subscribed|emergency] [--output FILE]
    python -m watertower.cli status
    python -m watertower.cli version
"""

import argparse
import json
import logging
import sys

logger = logging.getLogger('WaterTower.CLI')

WIRING_CHOICES = {
    'subscribed': 'SUBSCRIBED',
    'emergency': 'EMERGENCY_ONLY',
}


def setup_logging(verbose: bool = False):
    """配置日志系统"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )


def _build_config(args):
    from .config.settings import NetworkConfig, PumpWiring

    config = NetworkConfig.default()
    config.simulation.pump_wiring = PumpWiring[WIRING_CHOICES[args.wiring]]
    if args.max_volume is not None:
        config.tower.max_volume = args.max_volume
    return config


def cmd_run(args):
    """运行仿真"""
    from .simulation.runner import run_simulation

    print(f"启动仿真...")
    print(f"  节拍数: {args.ticks}")
    print(f"  接线: {args.wiring}")

    try:
        config = _build_config(args)
        result = run_simulation(args.ticks, config)
    except ValueError as e:
        logger.error(str(e))
        return 2

    print("\n" + result.summary())

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"\n结果已保存到: {args.output}")

    return 0 if result.success else 1


def cmd_status(args):
    """显示默认网络状态"""
    from .simulation.network import WaterSupplyNetwork

    network = WaterSupplyNetwork()
    snap = network.snapshot()

    print("\n供水网络状态")
    print("=" * 40)
    for line in network.status_board.lines():
        print(line)

    print(f"\n时间: {snap.minutes} min")
    print("\n水泵:")
    for pump in snap.pumps:
        extra = f" 热量={pump.heat_level}" if pump.heat_level is not None else ""
        print(f"  {pump.name:<10} {pump.kind.value:<9} {pump.flow_rate:>4} L/min "
              f"@{pump.position} {pump.status.value}{extra}")

    print("\n用户:")
    for consumer in snap.consumers:
        print(f"  {consumer.name:<10} {consumer.consumption:>4} L/tick @{consumer.position}")

    return 0


def cmd_version(args):
    """显示版本信息"""
    import watertower

    print("水塔供水网络仿真系统")
    print("=" * 40)
    print(f"版本: {watertower.__version__}")
    print(f"作者: {watertower.__author__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='watertower',
        description='水塔供水网络仿真'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='详细日志')
    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    # run
    run_parser = subparsers.add_parser('run', help='运行仿真')
    run_parser.add_argument('--ticks', type=int, default=60, help='节拍数')
    run_parser.add_argument('--wiring', choices=sorted(WIRING_CHOICES), default='subscribed',
                            help='水泵接线方式')
    run_parser.add_argument('--max-volume', type=int, default=None, help='水塔容积 (L)')
    run_parser.add_argument('--output', '-o', type=str, help='结果输出文件 (JSON)')
    run_parser.set_defaults(func=cmd_run)

    # status
    status_parser = subparsers.add_parser('status', help='显示网络状态')
    status_parser.set_defaults(func=cmd_status)

    # version
    version_parser = subparsers.add_parser('version', help='显示版本')
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv=None) -> int:
    """主入口"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(args.verbose)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
