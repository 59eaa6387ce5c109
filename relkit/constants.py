"""relkit 工具包常量定义

集中管理版本计算、兼容列表解析使用的常量、路径和环境变量。
"""

from __future__ import annotations

from pathlib import Path

# ---------- 路径常量 ----------
ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = ROOT / "release.yaml"
BUILD_CONSTANTS_PATH = ROOT / "build" / "generated" / "build_constants.py"

# ---------- 环境变量 ----------
ENV_RELEASE = "DOCKBRIDGE_RELEASE"
ENV_VERSION = "DOCKBRIDGE_VERSION"
ENV_CONFIG = "DOCKBRIDGE_RELEASE_CONFIG"
ENV_CATALOG_URL = "DOCKBRIDGE_CATALOG_URL"
ENV_CATALOG_TIMEOUT = "DOCKBRIDGE_CATALOG_TIMEOUT"
ENV_GAME_VERSIONS = "MODRINTH_GAME_VERSIONS"
ENV_TOKEN = "MODRINTH_TOKEN"
ENV_CHANGELOG = "MODRINTH_CHANGELOG"
ENV_GITHUB_OUTPUT = "GITHUB_OUTPUT"
ENV_DRY_RUN = "HC_DRY_RUN"
ENV_DRY_RUN_VALUES = ("1", "true", "True")

# ---------- 退出码 ----------
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 3
EXIT_CAPACITY_EXCEEDED = 6
EXIT_CONFIG_ERROR = 7

# ---------- 版本格式 ----------
DATE_FORMAT = "%Y.%m.%d"
NO_GIT_TOKEN = "nogit"
REVISION_LENGTH = 8
# 未带后缀为第 0 次发布，A..Z 为 1..26
MAX_RELEASE_ORDINAL = 26
PATTERN_RELEASE_TAG = r"^(\d{4}\.\d{2}\.\d{2})(?:-([A-Z]))?$"
PATTERN_PLATFORM_VERSION = r"^\d+(?:\.\d+)*$"

# ---------- 兼容列表 ----------
CATALOG_URL = "https://api.modrinth.com/v2/tag/game_version"
CATALOG_TIMEOUT = 5.0
USER_AGENT = "DockBridge-Release"
RELEASE_VERSION_TYPE = "release"
VERSION_FLOOR = (1, 19, 4)
# 目录不可用时使用的已验证版本
FALLBACK_GAME_VERSIONS = (
    "1.19.4",
    "1.20",
    "1.20.1",
    "1.20.2",
    "1.20.3",
    "1.20.4",
    "1.20.5",
    "1.20.6",
    "1.21",
    "1.21.1",
    "1.21.2",
    "1.21.3",
    "1.21.4",
)

# ---------- 发布信息 ----------
PROJECT_ID = "dockbridge"
DEFAULT_LOADERS = ("velocity",)
DEFAULT_VERSION_TYPE = "release"

# ---------- 命令行参数 ----------
GIT_TAG_LIST_ARGS = ["git", "tag", "--list"]
GIT_REVISION_ARGS = ["git", "rev-parse", f"--short={REVISION_LENGTH}", "HEAD"]
