"""处理模块：版本常量文件与发布清单"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from relkit import constants, io
from relkit.config import BuildConfig

LOG = logging.getLogger("relkit.processing")

BUILD_CONSTANTS_TEMPLATE = '''"""构建时生成，请勿手动修改"""

VERSION = "{version}"
'''


def is_dry_run(environ: Optional[Mapping[str, str]] = None) -> bool:
    """检查是否为干运行模式"""
    if environ is None:
        environ = os.environ
    return environ.get(constants.ENV_DRY_RUN, "0") in constants.ENV_DRY_RUN_VALUES


def render_build_constants(version: str) -> str:
    """生成包含版本号的常量模块源码"""
    escaped = version.replace("\\", "\\\\").replace('"', '\\"')
    return BUILD_CONSTANTS_TEMPLATE.format(version=escaped)


def write_build_constants(
    version: str, path: Optional[Path] = None, dry_run: bool = False
) -> bool:
    """写入版本常量文件，内容未变化时返回 False"""
    if path is None:
        path = constants.BUILD_CONSTANTS_PATH
    content = render_build_constants(version)

    if path.exists() and io.read_file(path) == content:
        LOG.info("%s 已是最新（%s）", path, version)
        return False

    LOG.info("写入版本常量 %s -> %s", version, path)
    if not dry_run:
        io.write_file(path, content)
    return True


def build_manifest(
    config: BuildConfig, version: str, game_versions: List[str]
) -> dict:
    """发布客户端使用的清单，不包含任何凭据"""
    return {
        "project_id": config.project_id,
        "version_number": version,
        "version_type": config.version_type,
        "changelog": config.changelog,
        "game_versions": list(game_versions),
        "loaders": list(config.loaders),
    }
