"""DockBridge 的 Hatch 构建钩子"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from relkit import config, constants, processing, versioning
from relkit.exceptions import CapacityExceeded, ConfigError

LOG = logging.getLogger("relkit.hatch_hooks")

# 可由测试 monkeypatch 的路径
BUILD_CONSTANTS = constants.BUILD_CONSTANTS_PATH


def pre_build(
    *_args,
    output: Optional[Path] = None,
    config_file: Optional[Path] = None,
    **_kwargs,
) -> str:
    """
    Pre-build 预构建钩子
    计算版本号并写入版本常量文件，发布次数用尽时中止构建
    """
    logging.basicConfig(level=logging.INFO)
    dry_run = processing.is_dry_run()
    LOG.info("运行 pre-build 钩子（dry-run=%s）", dry_run)

    try:
        build_config = config.load_config(config_file=config_file)
        version = versioning.resolve_plugin_version(build_config)
        processing.write_build_constants(version, output or BUILD_CONSTANTS, dry_run)
    except CapacityExceeded as e:
        LOG.error("版本计算失败: %s", e)
        raise SystemExit(constants.EXIT_CAPACITY_EXCEEDED)
    except ConfigError as e:
        LOG.error("配置无效: %s", e)
        raise SystemExit(constants.EXIT_CONFIG_ERROR)
    except Exception:
        LOG.exception("运行 pre-build 钩子时发生意外错误")
        raise SystemExit(constants.EXIT_GENERAL_ERROR)

    LOG.info("构建版本 %s", version)
    return version
