# -*- coding: utf-8 -*-
"""
参数选择模块

根据图片大小、MIME类型和用户请求的质量，从固定的策略表中选出编码参数。
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from astrbot.api import logger

from image_compressor.compression.config import (
    DEFAULT_MAX_DIMENSION,
    DEFAULT_MAX_ITERATIONS,
    EncodingConfig,
)
from image_compressor.compression.format import ImageFormat

KB = 1024
MB = 1024 * KB


@dataclass(frozen=True)
class PolicyRow:
    """策略表中的一行"""

    name: str
    is_png: bool
    matches: Callable[[int], bool]
    target_size_mb: float
    quality_cap: float
    conversion_size_threshold_kb: Optional[int] = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS


# 自上而下匹配，第一条命中的规则生效
POLICY_TABLE: Tuple[PolicyRow, ...] = (
    PolicyRow(
        name="png-small",
        is_png=True,
        matches=lambda size: size < 200 * KB,
        target_size_mb=0.5,
        quality_cap=0.6,
        conversion_size_threshold_kb=100,
        max_iterations=10,
    ),
    PolicyRow(
        name="png-large",
        is_png=True,
        matches=lambda size: size >= 200 * KB,
        target_size_mb=0.7,
        quality_cap=0.7,
    ),
    PolicyRow(
        name="large",
        is_png=False,
        matches=lambda size: size > MB,
        target_size_mb=0.8,
        quality_cap=0.7,
    ),
    PolicyRow(
        name="medium",
        is_png=False,
        matches=lambda size: 200 * KB < size <= MB,
        target_size_mb=0.9,
        quality_cap=0.8,
    ),
    PolicyRow(
        name="small",
        is_png=False,
        matches=lambda size: size <= 200 * KB,
        target_size_mb=0.95,
        quality_cap=0.9,
    ),
)


def find_policy(size: int, mime_type: str) -> PolicyRow:
    """
    查找命中的策略行

    Args:
        size: 原图大小（字节）
        mime_type: 原图MIME类型，未知类型按非PNG处理

    Returns:
        命中的策略行
    """
    is_png = ImageFormat.from_mime_type(mime_type) is ImageFormat.PNG
    for row in POLICY_TABLE:
        if row.is_png == is_png and row.matches(size):
            return row
    # 各分桶覆盖全部非负大小，走到这里说明大小为负数
    raise ValueError(f"无效的图片大小: {size}")


def select_encoding_config(size: int, mime_type: str, quality: float) -> EncodingConfig:
    """
    生成编码参数

    Args:
        size: 原图大小（字节）
        mime_type: 原图MIME类型
        quality: 用户请求的质量 (0-1)

    Returns:
        编码参数，target_quality 不会超过请求的质量
    """
    row = find_policy(size, mime_type)
    config = EncodingConfig(
        target_size_mb=row.target_size_mb,
        target_quality=min(row.quality_cap, quality),
        max_dimension=DEFAULT_MAX_DIMENSION,
        conversion_size_threshold_kb=row.conversion_size_threshold_kb,
        max_iterations=row.max_iterations,
    )
    logger.debug(
        f"参数选择: 大小 {size} 字节, 类型 {mime_type}, 命中 {row.name}, "
        f"目标 {config.target_size_mb}MB, 质量 {config.target_quality}"
    )
    return config
