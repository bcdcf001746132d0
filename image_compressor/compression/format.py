# -*- coding: utf-8 -*-
"""
图片格式枚举和检测工具
"""

from enum import Enum

import io
from PIL import Image, UnidentifiedImageError

from astrbot.api import logger


class ImageFormat(Enum):
    """图片格式枚举"""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    UNKNOWN = "unknown"

    @property
    def mime_type(self) -> str:
        """对应的MIME类型，未知格式返回 application/octet-stream"""
        if self is ImageFormat.UNKNOWN:
            return "application/octet-stream"
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        """文件扩展名（不含点）"""
        return "jpg" if self is ImageFormat.JPEG else self.value

    @staticmethod
    def from_pil_format(pil_format: str | None) -> "ImageFormat":
        """
        从PIL格式转换为ImageFormat

        Args:
            pil_format: PIL的format属性值

        Returns:
            对应的ImageFormat枚举
        """
        if not pil_format:
            return ImageFormat.UNKNOWN

        format_map = {
            "JPEG": ImageFormat.JPEG,
            "PNG": ImageFormat.PNG,
            "GIF": ImageFormat.GIF,
            "WEBP": ImageFormat.WEBP,
            "BMP": ImageFormat.BMP,
        }
        return format_map.get(pil_format.upper(), ImageFormat.UNKNOWN)

    @staticmethod
    def from_mime_type(mime_type: str | None) -> "ImageFormat":
        """
        从MIME类型转换为ImageFormat

        Args:
            mime_type: 例如 image/png、image/jpeg

        Returns:
            对应的ImageFormat枚举，无法识别时返回 UNKNOWN
        """
        if not mime_type:
            return ImageFormat.UNKNOWN

        subtype = mime_type.strip().lower().partition("/")[2]
        if subtype in ("jpg", "pjpeg"):
            subtype = "jpeg"
        for format_type in ImageFormat:
            if format_type.value == subtype:
                return format_type
        return ImageFormat.UNKNOWN


def detect_format(content: bytes) -> ImageFormat:
    """
    检测图片格式

    Args:
        content: 图片内容

    Returns:
        图片格式，检测失败时返回 ImageFormat.UNKNOWN
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            return ImageFormat.from_pil_format(img.format)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        logger.debug(f"图片格式检测失败: {e}")
        return ImageFormat.UNKNOWN


def is_decodable(content: bytes) -> bool:
    """判断内容能否被Pillow完整解码"""
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.load()
        return True
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
        EOFError,
    ) as e:
        logger.debug(f"图片无法解码: {e}")
        return False
