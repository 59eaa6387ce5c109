"""DockBridge 发布工具 - 统一入口"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from relkit import compat, config, constants, hatch_hooks, io, processing, versioning
from relkit.config import BuildConfig
from relkit.exceptions import CapacityExceeded, ConfigError


def setup_logging(verbose: bool = False) -> None:
    """配置日志级别"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s - %(levelname)s - %(message)s",
    )


def show_version(build_config: BuildConfig) -> int:
    """打印本次构建的版本号"""
    print(versioning.resolve_plugin_version(build_config))
    return constants.EXIT_SUCCESS


def show_game_versions(build_config: BuildConfig) -> int:
    """逐行打印兼容的 Minecraft 版本"""
    for version in compat.resolve_compatible_versions(build_config):
        print(version)
    return constants.EXIT_SUCCESS


def show_manifest(build_config: BuildConfig) -> int:
    """打印发布清单 JSON"""
    version = versioning.resolve_plugin_version(build_config)
    game_versions = compat.resolve_compatible_versions(build_config)
    manifest = processing.build_manifest(build_config, version, game_versions)
    print(json.dumps(manifest, ensure_ascii=False, indent=2))
    return constants.EXIT_SUCCESS


def show_tags() -> int:
    """显示今天的最新发布标签和下一个发布版本"""
    today = versioning.utc_date_part()
    tags = io.list_tags(today)
    latest = versioning.latest_release(tags)

    print(f"日期: {today}")
    print(f"最新发布标签: {latest or '无'}")
    print(f"下一个发布版本: {versioning.compute_release_version(today, tags)}")
    return constants.EXIT_SUCCESS


def run_stamp(
    output: Optional[Path] = None,
    config_file: Optional[Path] = None,
    dry_run: bool = True,
) -> int:
    """通过 pre-build 钩子写入版本常量文件"""
    old_dry = os.environ.get(constants.ENV_DRY_RUN)

    try:
        if dry_run:
            os.environ[constants.ENV_DRY_RUN] = "1"
        else:
            os.environ.pop(constants.ENV_DRY_RUN, None)

        version = hatch_hooks.pre_build(output=output, config_file=config_file)
        print(f"✅ {version}{'（dry-run）' if dry_run else ''}")
        return constants.EXIT_SUCCESS

    except SystemExit as e:
        exit_code = (
            getattr(e, "code", constants.EXIT_GENERAL_ERROR)
            or constants.EXIT_GENERAL_ERROR
        )
        print(f"❌ pre-build 钩子失败: {exit_code}", file=sys.stderr)
        return exit_code
    finally:
        if old_dry is None:
            os.environ.pop(constants.ENV_DRY_RUN, None)
        else:
            os.environ[constants.ENV_DRY_RUN] = old_dry


def create_parser() -> argparse.ArgumentParser:
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="relkit",
        description="DockBridge 发布版本工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  relkit version                     # 打印本次构建的版本号
  DOCKBRIDGE_RELEASE=true relkit version  # 以发布模式计算版本
  relkit game-versions               # 打印兼容的 Minecraft 版本
  relkit manifest                    # 打印发布清单
  relkit tags                        # 查看今天的发布标签
  relkit stamp --no-dry-run          # 写入版本常量文件
        """,
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="启用详细输出")
    parser.add_argument("--config", type=Path, help="YAML 配置文件")

    subparsers = parser.add_subparsers(dest="command", title="可用命令", metavar="COMMAND")

    subparsers.add_parser("version", help="打印本次构建的版本号")
    subparsers.add_parser("game-versions", help="打印兼容的 Minecraft 版本")
    subparsers.add_parser("manifest", help="打印发布清单 JSON")
    subparsers.add_parser("tags", help="显示今天的发布标签")

    stamp_parser = subparsers.add_parser("stamp", help="写入版本常量文件")
    stamp_parser.add_argument("--output", type=Path, help="输出路径")
    stamp_parser.add_argument(
        "--no-dry-run", action="store_true", help="实际写入文件（默认是 dry-run 模式）"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return constants.EXIT_SUCCESS

    try:
        if args.command == "tags":
            return show_tags()

        if args.command == "stamp":
            return run_stamp(args.output, args.config, dry_run=not args.no_dry_run)

        build_config = config.load_config(config_file=args.config)

        if args.command == "version":
            return show_version(build_config)

        elif args.command == "game-versions":
            return show_game_versions(build_config)

        elif args.command == "manifest":
            return show_manifest(build_config)

    except CapacityExceeded as e:
        print(f"❌ {e}", file=sys.stderr)
        return constants.EXIT_CAPACITY_EXCEEDED
    except ConfigError as e:
        print(f"❌ 配置无效: {e}", file=sys.stderr)
        return constants.EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        print("\n✋ 操作被用户中断")
        return 130
    except Exception as e:
        print(f"❌ 执行命令时发生错误: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return constants.EXIT_GENERAL_ERROR

    return constants.EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
