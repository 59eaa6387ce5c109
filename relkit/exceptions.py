"""
# 异常
版本计算与发布流程使用的自定义异常
"""

from __future__ import annotations


class ReleaseError(Exception):
    """发布工具异常基类"""


class CapacityExceeded(ReleaseError):
    """同一天的发布次数已用尽（未带后缀 + A..Z，共 27 次）"""

    def __init__(self, date_part: str):
        self.date_part = date_part
        super().__init__(
            f"{date_part} 的发布次数已达上限（最多到 {date_part}-Z，共 27 次），"
            "请改天再发布或手动指定 DOCKBRIDGE_VERSION"
        )


class ConfigError(ReleaseError):
    """配置文件或环境变量无效"""
