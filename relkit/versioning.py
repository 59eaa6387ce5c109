"""版本计算模块：基于日期的发布版本与开发版本

发布版本：`YYYY.MM.DD`，同一天的后续发布依次追加 `-A` .. `-Z`。
开发版本：`YYYY.MM.DD-<8 位短哈希>`，无 git 信息时使用 `nogit`。
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple, Union

from relkit import constants, io
from relkit.config import BuildConfig
from relkit.exceptions import CapacityExceeded

LOG = logging.getLogger("relkit.versioning")

TagSource = Callable[[str], Iterable[str]]
RevisionSource = Callable[[], Optional[str]]

_RELEASE_TAG = re.compile(constants.PATTERN_RELEASE_TAG)


def utc_date_part(today: Union[date, datetime, None] = None) -> str:
    """返回 UTC 日期的 `YYYY.MM.DD` 形式"""
    if today is None:
        today = datetime.now(timezone.utc)
    elif isinstance(today, datetime) and today.tzinfo is not None:
        today = today.astimezone(timezone.utc)
    return today.strftime(constants.DATE_FORMAT)


def suffix_ordinal(letter: Optional[str]) -> int:
    """无后缀为 0，`A` 为 1，依此类推"""
    if not letter:
        return 0
    return ord(letter) - ord("A") + 1


def compute_release_version(date_part: str, existing_tags: Iterable[str]) -> str:
    """计算当天的下一个发布版本

    只统计与 `date_part` 完全匹配的标签，取最大序号加一；
    中间缺失的字母不会被回填。

    Raises:
        CapacityExceeded: 当天已经发布到 `-Z`
    """
    pattern = re.compile(rf"^{re.escape(date_part)}(?:-([A-Z]))?$")

    max_ordinal = -1
    for tag in existing_tags:
        match = pattern.fullmatch(tag)
        if match is None:
            continue
        max_ordinal = max(max_ordinal, suffix_ordinal(match.group(1)))

    if max_ordinal < 0:
        return date_part

    next_ordinal = max_ordinal + 1
    if next_ordinal > constants.MAX_RELEASE_ORDINAL:
        raise CapacityExceeded(date_part)
    return f"{date_part}-{chr(ord('A') + next_ordinal - 1)}"


def compute_snapshot_version(date_part: str, revision: Optional[str]) -> str:
    """计算开发版本，缺少修订号时使用固定占位符"""
    revision = (revision or "").strip().lower()
    return f"{date_part}-{revision or constants.NO_GIT_TOKEN}"


def resolve_plugin_version(
    config: BuildConfig,
    date_part: Optional[str] = None,
    tag_source: Optional[TagSource] = None,
    revision_source: Optional[RevisionSource] = None,
) -> str:
    """根据配置选择发布或开发模式并返回最终版本号

    外部显式指定的版本优先，原样返回。
    """
    if config.version_override:
        LOG.info("使用显式指定的版本 %s", config.version_override)
        return config.version_override

    if date_part is None:
        date_part = utc_date_part()

    if config.release:
        tags = list((tag_source or io.list_tags)(date_part))
        version = compute_release_version(date_part, tags)
        LOG.info("发布版本 %s（已有标签 %d 个）", version, len(tags))
        return version

    revision = (revision_source or io.get_revision)()
    if revision is None:
        LOG.debug("未找到 git 修订号，使用 %s", constants.NO_GIT_TOKEN)
    version = compute_snapshot_version(date_part, revision)
    LOG.info("开发版本 %s", version)
    return version


def release_sort_key(version: str) -> Tuple[str, int]:
    """发布版本排序键：同一天内无后缀早于任何字母后缀"""
    match = _RELEASE_TAG.fullmatch(version)
    if match is None:
        return version, -1
    return match.group(1), suffix_ordinal(match.group(2))


def latest_release(tags: Iterable[str]) -> Optional[str]:
    """返回格式合法的最新发布标签"""
    releases: List[str] = [tag for tag in tags if _RELEASE_TAG.fullmatch(tag)]
    if not releases:
        return None
    return max(releases, key=release_sort_key)
