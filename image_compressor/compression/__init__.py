# -*- coding: utf-8 -*-
"""
压缩模块 - 自适应图片压缩

根据图片格式与大小选择编码参数，执行压缩并保证结果不大于原图。
"""

from image_compressor.compression.config import EncodingConfig
from image_compressor.compression.format import ImageFormat, detect_format
from image_compressor.compression.manager import CompressionManager
from image_compressor.compression.models import CompressionOutcome, SourceImage
from image_compressor.compression.selector import select_encoding_config
from image_compressor.compression.strategy import (
    FlattenStrategy,
    PillowReencoder,
    ReencodeStrategy,
    WhiteBackgroundFlattener,
)

__all__ = [
    "CompressionManager",
    "EncodingConfig",
    "ImageFormat",
    "detect_format",
    "CompressionOutcome",
    "SourceImage",
    "select_encoding_config",
    "FlattenStrategy",
    "PillowReencoder",
    "ReencodeStrategy",
    "WhiteBackgroundFlattener",
]
