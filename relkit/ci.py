"""CI wrapper：供 GitHub Actions 调用的简洁入口

此模块提供一个最小入口 `main()`，在 CI 中调用时会：
- 计算本次构建的版本号
- 解析兼容的 Minecraft 版本列表
- 把结果写入 `$GITHUB_OUTPUT`（未设置时打印到标准输出）
- 可选地写出发布清单 JSON

workflow 中只需调用 `python -m relkit.ci` 即可拿到 `version` 与 `game_versions` 输出。
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from relkit import compat, config, constants, processing, versioning
from relkit.exceptions import CapacityExceeded, ConfigError


def write_outputs(values: Mapping[str, str], environ: Mapping[str, str]) -> None:
    """追加到 GitHub Actions 输出文件"""
    lines = "".join(f"{key}={value}\n" for key, value in values.items())
    output = environ.get(constants.ENV_GITHUB_OUTPUT)
    if not output:
        sys.stdout.write(lines)
        return
    with open(output, "a", encoding="utf-8") as fh:
        fh.write(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """主入口：返回 0 表示通过，非 0 表示失败（CI 会失败）。"""
    parser = argparse.ArgumentParser(description="计算发布版本与兼容列表")
    parser.add_argument("--manifest", type=Path, help="写出发布清单 JSON 的路径")
    parser.add_argument("--config", type=Path, help="YAML 配置文件")
    args = parser.parse_args(argv)

    environ = os.environ
    try:
        build_config = config.load_config(environ, args.config)
        version = versioning.resolve_plugin_version(build_config)
    except ConfigError as e:
        print("配置无效：", e, file=sys.stderr)
        return constants.EXIT_CONFIG_ERROR
    except CapacityExceeded as e:
        print("版本计算失败：", e, file=sys.stderr)
        return constants.EXIT_CAPACITY_EXCEEDED

    try:
        game_versions = compat.resolve_compatible_versions(build_config)
        write_outputs(
            {"version": version, "game_versions": ",".join(game_versions)}, environ
        )

        if args.manifest:
            manifest = processing.build_manifest(build_config, version, game_versions)
            args.manifest.parent.mkdir(parents=True, exist_ok=True)
            args.manifest.write_text(
                json.dumps(manifest, ensure_ascii=False, indent=2) + "\n",
                encoding="utf-8",
            )
    except Exception as e:
        print("写出 CI 结果时出错：", e, file=sys.stderr)
        return constants.EXIT_GENERAL_ERROR

    return constants.EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
