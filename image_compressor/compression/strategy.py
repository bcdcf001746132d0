# -*- coding: utf-8 -*-
"""
编码策略模块

重新编码（缩放 + 质量压缩）与 PNG 平铺转 JPEG 两种能力，
均以抽象基类暴露，默认实现基于 Pillow。
"""

import asyncio
import io
from abc import ABC, abstractmethod

from PIL import Image, ImageOps

from astrbot.api import logger

from image_compressor.compression.config import EncodingConfig
from image_compressor.compression.format import ImageFormat
from image_compressor.compression.models import (
    OUTCOME_FALLBACK,
    OUTCOME_PRIMARY,
    CompressionOutcome,
)
from image_compressor.exceptions import CompressionFailedError

# 每次迭代的衰减系数
QUALITY_STEP = 0.9
SCALE_STEP = 0.9

MIN_PIL_QUALITY = 1
MAX_PIL_QUALITY = 95

WHITE = (255, 255, 255)


def to_pil_quality(quality: float) -> int:
    """将 0-1 的质量转换为Pillow使用的 1-95"""
    return min(max(round(quality * 100), MIN_PIL_QUALITY), MAX_PIL_QUALITY)


def has_alpha(img: Image.Image) -> bool:
    """判断图片是否带透明通道"""
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return img.mode == "P" and "transparency" in img.info


def flatten_image(img: Image.Image, background: tuple = WHITE) -> Image.Image:
    """
    将图片合成到不透明背景上，得到可保存为JPEG的RGB图片

    Args:
        img: PIL图片对象
        background: 背景颜色

    Returns:
        RGB模式的图片
    """
    if has_alpha(img):
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        canvas = Image.new("RGB", img.size, background)
        canvas.paste(img, mask=img.split()[-1])
        return canvas
    if img.mode not in ("RGB", "L"):
        return img.convert("RGB")
    return img


class ReencodeStrategy(ABC):
    """重新编码能力基类"""

    @abstractmethod
    async def reencode(
        self, content: bytes, mime_type: str, config: EncodingConfig
    ) -> CompressionOutcome:
        """
        按编码参数重新编码图片

        Args:
            content: 原图内容
            mime_type: 原图MIME类型
            config: 编码参数

        Returns:
            编码结果
        """
        pass


class FlattenStrategy(ABC):
    """平铺转换能力基类（PNG转不透明JPEG）"""

    @abstractmethod
    async def flatten(self, content: bytes, quality: float) -> CompressionOutcome:
        """
        将图片平铺到白色背景并编码为JPEG

        Args:
            content: 原图内容
            quality: 编码质量 (0-1)

        Returns:
            编码结果
        """
        pass


class PillowReencoder(ReencodeStrategy):
    """基于Pillow的重新编码实现"""

    async def reencode(
        self, content: bytes, mime_type: str, config: EncodingConfig
    ) -> CompressionOutcome:
        """重新编码（异步包装器）"""
        # 将同步的PIL操作放到线程池中执行
        return await asyncio.to_thread(self._reencode_sync, content, mime_type, config)

    def _reencode_sync(
        self, content: bytes, mime_type: str, config: EncodingConfig
    ) -> CompressionOutcome:
        """同步重新编码"""
        try:
            with Image.open(io.BytesIO(content)) as opened:
                source_format = ImageFormat.from_pil_format(opened.format)
                if source_format is ImageFormat.UNKNOWN:
                    source_format = ImageFormat.from_mime_type(mime_type)
                # exif_transpose 返回副本，关闭原文件后仍可使用
                img = ImageOps.exif_transpose(opened)
                img.load()

            output_format = self._select_output_format(source_format, len(content), config)
            img = self._resize_image(img, config.max_dimension)
            img = self._prepare_mode(img, output_format)

            target_size = config.target_size_bytes
            iterations = max(config.max_iterations, 1)
            quality = config.target_quality

            data = self._encode(img, output_format, quality)
            attempt = 1
            while len(data) > target_size and attempt < iterations:
                if output_format is ImageFormat.PNG:
                    # PNG 没有质量参数，逐步缩小尺寸
                    width, height = img.size
                    new_size = (max(int(width * SCALE_STEP), 1), max(int(height * SCALE_STEP), 1))
                    if new_size == img.size:
                        break
                    img = img.resize(new_size, Image.Resampling.LANCZOS)
                else:
                    quality *= QUALITY_STEP
                data = self._encode(img, output_format, quality)
                attempt += 1
                logger.debug(
                    f"第 {attempt} 次编码: 质量 {quality:.2f}, 尺寸 {img.size}, "
                    f"大小 {len(data)} 字节, 目标 {target_size} 字节"
                )

            logger.debug(
                f"重新编码完成: {len(content)} -> {len(data)} 字节, "
                f"格式 {output_format.value}, 迭代 {attempt} 次"
            )
            return CompressionOutcome.from_bytes(data, output_format.mime_type, OUTCOME_PRIMARY)

        except Exception as e:
            logger.error(f"重新编码失败: {e}")
            raise CompressionFailedError(f"重新编码失败: {e}") from e

    def _select_output_format(
        self, source_format: ImageFormat, size: int, config: EncodingConfig
    ) -> ImageFormat:
        """
        决定输出格式

        JPEG、PNG、WebP 保持原格式，其余格式输出为 JPEG；
        设置了转换阈值时，超过阈值的 PNG 转换为 JPEG。
        """
        if source_format not in (ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.WEBP):
            return ImageFormat.JPEG

        threshold = config.conversion_size_threshold_bytes
        if source_format is ImageFormat.PNG and threshold is not None and size > threshold:
            logger.debug(f"PNG大小 {size} 字节超过转换阈值 {threshold} 字节，转换为JPEG")
            return ImageFormat.JPEG

        return source_format

    def _resize_image(self, img: Image.Image, max_dimension: int) -> Image.Image:
        """
        调整图片尺寸，最长边不超过 max_dimension（保持比例）

        Args:
            img: PIL图片对象
            max_dimension: 最长边限制

        Returns:
            调整后的图片
        """
        if img.size[0] > max_dimension or img.size[1] > max_dimension:
            img_copy = img.copy()
            img_copy.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
            logger.debug(f"调整尺寸: {img.size} -> {img_copy.size}")
            return img_copy
        return img

    def _prepare_mode(self, img: Image.Image, output_format: ImageFormat) -> Image.Image:
        """将图片转换为目标格式支持的颜色模式"""
        if output_format is ImageFormat.JPEG:
            return flatten_image(img)
        if img.mode not in ("RGB", "RGBA"):
            return img.convert("RGBA" if has_alpha(img) else "RGB")
        return img

    def _encode(self, img: Image.Image, output_format: ImageFormat, quality: float) -> bytes:
        """按给定质量编码一次"""
        output = io.BytesIO()
        if output_format is ImageFormat.PNG:
            frame = img
            if quality < 1:
                colors = max(2, round(256 * quality))
                frame = img.quantize(colors=colors)
            frame.save(output, format="PNG", optimize=True, compress_level=9)
        elif output_format is ImageFormat.WEBP:
            img.save(output, format="WEBP", quality=to_pil_quality(quality), method=6)
        else:
            img.save(output, format="JPEG", quality=to_pil_quality(quality), optimize=True)
        return output.getvalue()


class WhiteBackgroundFlattener(FlattenStrategy):
    """将图片合成到白色背景后编码为JPEG"""

    async def flatten(self, content: bytes, quality: float) -> CompressionOutcome:
        """平铺转换（异步包装器）"""
        return await asyncio.to_thread(self._flatten_sync, content, quality)

    def _flatten_sync(self, content: bytes, quality: float) -> CompressionOutcome:
        """同步平铺转换"""
        try:
            with Image.open(io.BytesIO(content)) as img:
                canvas = flatten_image(img)
                output = io.BytesIO()
                canvas.save(output, format="JPEG", quality=to_pil_quality(quality), optimize=True)

            data = output.getvalue()
            logger.debug(f"平铺转换为JPEG: {len(content)} -> {len(data)} 字节")
            return CompressionOutcome.from_bytes(data, ImageFormat.JPEG.mime_type, OUTCOME_FALLBACK)

        except Exception as e:
            logger.error(f"平铺转换失败: {e}")
            raise CompressionFailedError(f"平铺转换失败: {e}") from e
