# -*- coding: utf-8 -*-
"""
编码配置模块
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_DIMENSION = 1920
DEFAULT_MAX_ITERATIONS = 1


@dataclass(frozen=True)
class EncodingConfig:
    """单次压缩使用的编码参数，由参数选择器生成，创建后不可修改"""

    target_size_mb: float  # 目标大小（MB）
    target_quality: float  # 质量上限 (0-1)
    max_dimension: int = DEFAULT_MAX_DIMENSION  # 最长边限制（像素）
    conversion_size_threshold_kb: Optional[int] = None  # PNG超过该大小（KB）时转换为JPEG
    max_iterations: int = DEFAULT_MAX_ITERATIONS  # 重新编码内部的最大迭代次数

    @property
    def target_size_bytes(self) -> int:
        """目标大小（字节）"""
        return int(self.target_size_mb * 1024 * 1024)

    @property
    def conversion_size_threshold_bytes(self) -> Optional[int]:
        """PNG转换阈值（字节），未设置时为 None"""
        if self.conversion_size_threshold_kb is None:
            return None
        return self.conversion_size_threshold_kb * 1024
