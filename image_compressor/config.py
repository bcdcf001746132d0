# -*- coding: utf-8 -*-
"""
配置管理模块
"""

from typing import Any, Dict, Optional


class PluginConfig:
    """插件配置包装类，提供统一的配置访问接口"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        初始化配置

        Args:
            config: AstrBot传入的配置字典
        """
        self.config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值

        Args:
            key: 配置键
            default: 默认值

        Returns:
            配置值
        """
        return self.config.get(key, default)

    # 压缩配置
    @property
    def default_quality(self) -> int:
        """未指定质量时使用的默认质量 (1-100)"""
        return self.get("default_quality", 80)

    @property
    def fallback_ratio(self) -> float:
        """PNG压缩后大小超过原图该比例时尝试转换为JPEG"""
        return self.get("fallback_ratio", 0.9)

    @property
    def max_input_size_mb(self) -> float:
        """允许处理的最大输入大小（MB）"""
        return self.get("max_input_size_mb", 20)

    @property
    def max_input_size(self) -> int:
        """允许处理的最大输入大小（字节）"""
        return int(self.max_input_size_mb * 1024 * 1024)

    # 下载配置
    @property
    def download_timeout(self) -> int:
        """图片下载超时（秒）"""
        return self.get("download_timeout", 30)

    # 回复配置
    @property
    def show_ratio(self) -> bool:
        """回复中是否显示压缩率"""
        return self.get("show_ratio", True)

    def quality_fraction(self, percent: Optional[float] = None) -> float:
        """
        将百分比质量转换为 0-1 之间的小数

        Args:
            percent: 质量百分比（数字或数字字符串），None 表示使用默认质量

        Returns:
            质量小数，范围被限制在 0.01-1.0
        """
        if percent is None:
            percent = self.default_quality
        percent = min(max(float(percent), 1), 100)
        return percent / 100
