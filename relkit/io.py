"""IO操作模块：文件读写、git 子进程调用等基础操作"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from relkit import constants

LOG = logging.getLogger("relkit.io")


def read_file(path: Path, encoding: str = "utf-8") -> str:
    """读取文件内容"""
    return path.read_text(encoding=encoding)


def write_file(path: Path, content: str, encoding: str = "utf-8") -> None:
    """写入文件内容，必要时创建父目录"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding=encoding)


def execute_command(
    cmd: Sequence[str], cwd: Optional[Path] = None
) -> Tuple[str, int]:
    """执行命令并返回标准输出和退出码"""
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        LOG.error("命令未找到: %s", cmd[0])
        raise
    return result.stdout.strip(), result.returncode


def git_output(*args: str, cwd: Optional[Path] = None) -> Optional[str]:
    """运行 git 命令，失败或输出为空时返回 None"""
    try:
        output, returncode = execute_command(["git", *args], cwd=cwd or constants.ROOT)
    except OSError as e:
        LOG.debug("无法运行 git: %s", e)
        return None
    if returncode != 0 or not output:
        LOG.debug("git %s 退出码 %s，无输出", " ".join(args), returncode)
        return None
    return output


def list_tags(date_part: str) -> List[str]:
    """列出以 `date_part` 开头的 git 标签，git 不可用时返回空列表"""
    output = git_output(*constants.GIT_TAG_LIST_ARGS[1:], f"{date_part}*")
    if output is None:
        return []
    return [line.strip() for line in output.splitlines() if line.strip()]


def get_revision() -> Optional[str]:
    """获取当前检出的 8 位短哈希，非仓库或浅克隆异常时返回 None"""
    return git_output(*constants.GIT_REVISION_ARGS[1:])
