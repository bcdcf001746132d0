"""
图片压缩插件核心模块
"""

from image_compressor.config import PluginConfig
from image_compressor.exceptions import (
    ImageCompressorError,
    UnsupportedInputError,
    CompressionFailedError,
    DownloadError,
)

__all__ = [
    "PluginConfig",
    "ImageCompressorError",
    "UnsupportedInputError",
    "CompressionFailedError",
    "DownloadError",
]
