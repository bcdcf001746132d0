# -*- coding: utf-8 -*-
"""
压缩输入输出数据模型
"""

from dataclasses import dataclass

from image_compressor.compression.format import ImageFormat

OUTCOME_PRIMARY = "primary"
OUTCOME_FALLBACK = "fallback"
OUTCOME_ORIGINAL = "original"


@dataclass(frozen=True)
class SourceImage:
    """用户提供的原始图片，压缩过程只读不改"""

    content: bytes
    mime_type: str
    name: str = "image"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def format(self) -> ImageFormat:
        return ImageFormat.from_mime_type(self.mime_type)

    @property
    def is_png(self) -> bool:
        return self.format is ImageFormat.PNG


@dataclass(frozen=True)
class CompressionOutcome:
    """一次编码的结果

    source 标记结果来自哪条路径：primary（常规压缩）、fallback（PNG转JPEG）
    或 original（压缩无效，返回原图）。
    """

    content: bytes
    size: int
    mime_type: str
    source: str = OUTCOME_PRIMARY

    @classmethod
    def from_bytes(
        cls, content: bytes, mime_type: str, source: str = OUTCOME_PRIMARY
    ) -> "CompressionOutcome":
        return cls(content=content, size=len(content), mime_type=mime_type, source=source)

    @classmethod
    def unchanged(cls, image: SourceImage) -> "CompressionOutcome":
        """以原图作为结果"""
        return cls(
            content=image.content,
            size=image.size,
            mime_type=image.mime_type,
            source=OUTCOME_ORIGINAL,
        )
