"""兼容列表模块：解析插件声明兼容的 Minecraft 版本

优先级：显式覆盖 -> 远程目录（过滤后） -> 内置回退列表。
远程目录只请求一次，任何失败都降级为回退列表并记录警告。
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import aiohttp

from relkit import constants
from relkit.config import BuildConfig

LOG = logging.getLogger("relkit.compat")

_PLATFORM_VERSION = re.compile(constants.PATTERN_PLATFORM_VERSION)


class CatalogStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class CatalogResult:
    """一次目录请求的结果"""

    status: CatalogStatus
    versions: Tuple[str, ...] = ()
    error: Optional[str] = None

    @classmethod
    def ok(cls, versions: Iterable[str]) -> "CatalogResult":
        versions = tuple(versions)
        if not versions:
            return cls(CatalogStatus.EMPTY)
        return cls(CatalogStatus.OK, versions)

    @classmethod
    def failed(cls, error: str) -> "CatalogResult":
        return cls(CatalogStatus.ERROR, error=error)


CatalogFetcher = Callable[[BuildConfig], CatalogResult]


def parse_version(version: str) -> Optional[Tuple[int, ...]]:
    """把 `1.20.4` 解析为 `(1, 20, 4)`，快照等非数字版本返回 None"""
    version = version.strip()
    if not _PLATFORM_VERSION.fullmatch(version):
        return None
    return tuple(int(part) for part in version.split("."))


def version_at_least(version: str, floor: Sequence[int]) -> bool:
    """按分量比较版本是否不低于下限，缺失的尾部分量按 0 处理

    >>> version_at_least("1.20", [1, 19, 4])
    True
    >>> version_at_least("1.19", [1, 19, 4])
    False
    """
    parts = parse_version(version)
    if parts is None:
        return False
    width = max(len(parts), len(floor))
    left = list(parts) + [0] * (width - len(parts))
    right = list(floor) + [0] * (width - len(floor))
    for a, b in zip(left, right):
        if a != b:
            return a > b
    return True


def _entry_versions(entry: Any) -> List[str]:
    """提取单个目录条目中的版本字符串（含嵌套 versions 列表）"""
    if not isinstance(entry, dict):
        return []
    version_type = entry.get("version_type")
    if version_type is not None and version_type != constants.RELEASE_VERSION_TYPE:
        return []

    found = []
    version = entry.get("version")
    if isinstance(version, str):
        found.append(version)
    nested = entry.get("versions")
    if isinstance(nested, list):
        found.extend(item for item in nested if isinstance(item, str))
    return [item.strip() for item in found if item.strip()]


def parse_catalog(payload: Any, floor: Sequence[int]) -> CatalogResult:
    """过滤目录响应：仅保留正式版且不低于下限的版本，按首次出现去重"""
    if not isinstance(payload, list):
        return CatalogResult.failed(f"目录响应不是列表: {type(payload).__name__}")

    seen = set()
    versions = []
    for entry in payload:
        for version in _entry_versions(entry):
            if version in seen or not version_at_least(version, floor):
                continue
            seen.add(version)
            versions.append(version)
    return CatalogResult.ok(versions)


async def _request_json(
    url: str, connect_timeout: float, read_timeout: float
) -> Any:
    timeout = aiohttp.ClientTimeout(connect=connect_timeout, sock_read=read_timeout)
    headers = {"User-Agent": constants.USER_AGENT, "Accept": "application/json"}
    async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
        async with session.get(url) as resp:
            resp.raise_for_status()
            return await resp.json(content_type=None)


def fetch_catalog(config: BuildConfig) -> CatalogResult:
    """请求兼容目录（单次，不重试）并解析为结果对象"""
    LOG.debug("请求兼容目录 %s", config.catalog_url)
    try:
        payload = asyncio.run(
            _request_json(
                config.catalog_url, config.connect_timeout, config.read_timeout
            )
        )
    except asyncio.TimeoutError:
        return CatalogResult.failed("请求超时")
    except aiohttp.ClientResponseError as e:
        return CatalogResult.failed(f"HTTP {e.status}: {e.message}")
    except aiohttp.ClientError as e:
        return CatalogResult.failed(f"网络错误: {e}")
    except ValueError as e:
        return CatalogResult.failed(f"无法解析响应: {e}")
    return parse_catalog(payload, config.version_floor)


def resolve_compatible_versions(
    config: BuildConfig, fetch: Optional[CatalogFetcher] = None
) -> List[str]:
    """解析最终的兼容版本列表，该函数不会抛出目录相关的错误"""
    if config.game_versions_override:
        LOG.info("使用显式指定的兼容版本: %s", ", ".join(config.game_versions_override))
        return list(config.game_versions_override)

    result = (fetch or fetch_catalog)(config)
    if result.status is CatalogStatus.OK:
        LOG.info("从目录解析到 %d 个兼容版本", len(result.versions))
        return list(result.versions)

    if result.status is CatalogStatus.EMPTY:
        LOG.warning("兼容目录过滤后为空，使用内置回退列表")
    else:
        LOG.warning("无法从兼容目录解析版本（%s），使用内置回退列表", result.error)
    return list(constants.FALLBACK_GAME_VERSIONS)
