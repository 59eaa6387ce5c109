"""配置模块：构建一次、按值传递的发布配置

默认值来自 constants，可被 YAML 配置文件覆盖，最后由环境变量覆盖。
核心逻辑只接收 `BuildConfig`，不直接读取环境变量。
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

import yaml

from relkit import constants
from relkit.exceptions import ConfigError

LOG = logging.getLogger("relkit.config")


@dataclass(frozen=True)
class BuildConfig:
    """一次构建调用的全部操作员输入"""

    release: bool = False
    version_override: Optional[str] = None
    game_versions_override: Tuple[str, ...] = ()
    changelog: str = ""
    token: str = field(default="", repr=False)
    project_id: str = constants.PROJECT_ID
    loaders: Tuple[str, ...] = constants.DEFAULT_LOADERS
    version_type: str = constants.DEFAULT_VERSION_TYPE
    catalog_url: str = constants.CATALOG_URL
    connect_timeout: float = constants.CATALOG_TIMEOUT
    read_timeout: float = constants.CATALOG_TIMEOUT
    version_floor: Tuple[int, ...] = constants.VERSION_FLOOR


def parse_bool(value: Any) -> bool:
    """`true`（不区分大小写）视为开启，其余均为关闭"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def split_versions(value: Union[str, list, tuple, None]) -> Tuple[str, ...]:
    """把逗号分隔的字符串（或列表）拆分为去空白、去空项的元组"""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(item) for item in value]
    return tuple(item.strip() for item in items if item.strip())


def _parse_timeout(value: Any, source: str) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source} 不是有效的秒数: {value!r}")
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"{source} 必须是大于 0 的有限秒数: {value!r}")
    return timeout


def read_config_file(path: Path) -> dict:
    """读取 YAML 配置文件，空文件视为空配置"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"无法解析配置文件 {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件 {path} 顶层必须是映射")
    return data


def _resolve_config_path(
    config_file: Optional[Path], environ: Mapping[str, str]
) -> Optional[Path]:
    if config_file is not None:
        return Path(config_file)
    env_path = environ.get(constants.ENV_CONFIG)
    if env_path:
        return Path(env_path)
    if constants.DEFAULT_CONFIG_PATH.exists():
        return constants.DEFAULT_CONFIG_PATH
    return None


def _string_value(value: Any, key: str, path: Path) -> str:
    """YAML 会把未加引号的 1.20 读成浮点数 1.2，版本类字段只接受字符串"""
    if not isinstance(value, str):
        raise ConfigError(
            f"配置文件 {path} 中的 {key} 必须是字符串，版本号请加引号: {value!r}"
        )
    return value


def _string_list(value: Any, key: str, path: Path) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, list):
        return split_versions([_string_value(item, key, path) for item in value])
    return split_versions(_string_value(value, key, path))


def _apply_file(values: dict, data: dict, path: Path) -> None:
    if "release" in data:
        values["release"] = parse_bool(data["release"])
    if data.get("version") is not None:
        version = _string_value(data["version"], "version", path).strip()
        if version:
            values["version_override"] = version
    if "game_versions" in data:
        values["game_versions_override"] = _string_list(
            data["game_versions"], "game_versions", path
        )
    if "changelog" in data:
        values["changelog"] = str(data["changelog"] or "")
    if data.get("project_id"):
        values["project_id"] = str(data["project_id"])
    if "loaders" in data:
        values["loaders"] = _string_list(data["loaders"], "loaders", path)
    if data.get("version_type"):
        values["version_type"] = str(data["version_type"])

    catalog = data.get("catalog") or {}
    if not isinstance(catalog, dict):
        raise ConfigError(f"配置文件 {path} 中的 catalog 必须是映射")
    if catalog.get("url"):
        values["catalog_url"] = str(catalog["url"])
    if "connect_timeout" in catalog:
        values["connect_timeout"] = _parse_timeout(
            catalog["connect_timeout"], "catalog.connect_timeout"
        )
    if "read_timeout" in catalog:
        values["read_timeout"] = _parse_timeout(
            catalog["read_timeout"], "catalog.read_timeout"
        )


def _apply_environ(values: dict, environ: Mapping[str, str]) -> None:
    if constants.ENV_RELEASE in environ:
        values["release"] = parse_bool(environ[constants.ENV_RELEASE])

    version = (environ.get(constants.ENV_VERSION) or "").strip()
    if version:
        values["version_override"] = version

    game_versions = split_versions(environ.get(constants.ENV_GAME_VERSIONS))
    if game_versions:
        values["game_versions_override"] = game_versions

    if constants.ENV_TOKEN in environ:
        values["token"] = environ[constants.ENV_TOKEN]
    if constants.ENV_CHANGELOG in environ:
        values["changelog"] = environ[constants.ENV_CHANGELOG]

    url = (environ.get(constants.ENV_CATALOG_URL) or "").strip()
    if url:
        values["catalog_url"] = url

    timeout = environ.get(constants.ENV_CATALOG_TIMEOUT)
    if timeout:
        seconds = _parse_timeout(timeout, constants.ENV_CATALOG_TIMEOUT)
        values["connect_timeout"] = seconds
        values["read_timeout"] = seconds


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
) -> BuildConfig:
    """在进程启动时构建一次配置

    Args:
        environ: 环境变量映射，默认使用 `os.environ`
        config_file: 显式指定的 YAML 配置文件

    Raises:
        ConfigError: 配置文件或环境变量无效
    """
    if environ is None:
        environ = os.environ

    values: dict = {}
    path = _resolve_config_path(config_file, environ)
    if path is not None:
        if not path.exists():
            raise ConfigError(f"配置文件不存在: {path}")
        LOG.debug("读取配置文件 %s", path)
        _apply_file(values, read_config_file(path), path)

    _apply_environ(values, environ)
    return BuildConfig(**values)
