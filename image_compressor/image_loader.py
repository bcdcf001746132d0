# -*- coding: utf-8 -*-
"""
图片输入校验模块
"""

from typing import Optional

from astrbot.api import logger

from image_compressor.compression.format import ImageFormat, detect_format, is_decodable
from image_compressor.compression.models import SourceImage
from image_compressor.exceptions import UnsupportedInputError


def load_source(
    content: bytes,
    mime_type: Optional[str] = None,
    name: str = "image",
    max_size: Optional[int] = None,
) -> SourceImage:
    """
    校验输入并构造原图对象

    Args:
        content: 图片内容
        mime_type: 声明的MIME类型，None 时根据内容检测
        name: 文件名
        max_size: 允许的最大字节数，None 表示不限制

    Returns:
        原图对象

    Raises:
        UnsupportedInputError: 内容为空、类型不是图片或无法解码
    """
    if not content:
        logger.warning(f"图片内容为空: {name}")
        raise UnsupportedInputError("图片内容为空")

    if mime_type is not None and not mime_type.lower().startswith("image/"):
        logger.warning(f"不支持的文件类型: {mime_type} ({name})")
        raise UnsupportedInputError(f"不支持的文件类型: {mime_type}")

    if max_size is not None and len(content) > max_size:
        logger.warning(f"图片过大: {len(content)} 字节, 上限 {max_size} 字节 ({name})")
        raise UnsupportedInputError(f"图片过大: {len(content)} 字节")

    if not is_decodable(content):
        raise UnsupportedInputError(f"无法解码的图片: {name}")

    if mime_type is None:
        format_type = detect_format(content)
        if format_type is ImageFormat.UNKNOWN:
            raise UnsupportedInputError(f"无法识别的图片格式: {name}")
        mime_type = format_type.mime_type

    logger.debug(f"已载入图片 {name}: {len(content)} 字节, 类型 {mime_type}")
    return SourceImage(content=content, mime_type=mime_type.lower(), name=name)
