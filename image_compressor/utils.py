# -*- coding: utf-8 -*-
"""
展示相关的工具函数
"""

from pathlib import PurePath

SIZE_UNITS = ("B", "KB", "MB", "GB")

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
}


def format_size(num_bytes: int) -> str:
    """
    将字节数格式化为带单位的字符串

    Args:
        num_bytes: 字节数

    Returns:
        例如 "1.50 KB"，最大单位为 GB
    """
    size = float(num_bytes)
    i = 0
    while size >= 1024 and i < len(SIZE_UNITS) - 1:
        size /= 1024
        i += 1
    return f"{size:.2f} {SIZE_UNITS[i]}"


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """压缩率（节省的百分比，保留一位小数）"""
    if original_size <= 0:
        return 0.0
    return round((original_size - compressed_size) / original_size * 100, 1)


def compressed_filename(name: str, mime_type: str) -> str:
    """
    生成压缩后的文件名，扩展名跟随输出格式

    Args:
        name: 原文件名
        mime_type: 输出MIME类型

    Returns:
        例如 compressed_photo.jpg
    """
    path = PurePath(name or "image")
    suffix = EXTENSIONS.get(mime_type.lower(), path.suffix)
    return f"compressed_{path.stem}{suffix}"
