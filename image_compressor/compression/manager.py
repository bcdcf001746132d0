# -*- coding: utf-8 -*-
"""
压缩管理器模块
"""

from typing import Optional

from astrbot.api import logger

from image_compressor.compression.config import EncodingConfig
from image_compressor.compression.models import CompressionOutcome, SourceImage
from image_compressor.compression.selector import select_encoding_config
from image_compressor.compression.strategy import (
    FlattenStrategy,
    PillowReencoder,
    ReencodeStrategy,
    WhiteBackgroundFlattener,
)
from image_compressor.exceptions import CompressionFailedError
from image_compressor.utils import compression_ratio

DEFAULT_FALLBACK_RATIO = 0.9


class CompressionManager:
    """自适应压缩管理器

    一次压缩依次经过：参数选择 -> 常规压缩 -> （PNG效果不佳时）转JPEG -> 大小保护。
    结果永远不会比原图大，压缩无效时直接返回原图。
    """

    def __init__(
        self,
        reencoder: Optional[ReencodeStrategy] = None,
        flattener: Optional[FlattenStrategy] = None,
        fallback_ratio: float = DEFAULT_FALLBACK_RATIO,
    ):
        """
        初始化压缩管理器

        Args:
            reencoder: 重新编码能力，默认使用Pillow实现
            flattener: 平铺转换能力，默认使用白色背景JPEG实现
            fallback_ratio: PNG压缩后大小超过原图该比例时尝试转JPEG
        """
        self.reencoder = reencoder if reencoder is not None else PillowReencoder()
        self.flattener = flattener if flattener is not None else WhiteBackgroundFlattener()
        self.fallback_ratio = fallback_ratio

        logger.debug("压缩管理器初始化完成")

    async def compress(self, source: SourceImage, quality: float) -> CompressionOutcome:
        """
        统一压缩接口

        Args:
            source: 原图
            quality: 用户请求的质量 (0-1)

        Returns:
            压缩结果，大小不超过原图

        Raises:
            ValueError: 质量不在 0-1 范围内
            CompressionFailedError: 编码能力执行失败
        """
        if not 0 <= quality <= 1:
            raise ValueError(f"质量必须在 0 到 1 之间: {quality}")

        # 1. 选择参数
        config = select_encoding_config(source.size, source.mime_type, quality)

        # 2. 常规压缩
        best = await self._run_reencode(source, config)
        logger.debug(f"常规压缩结果: {source.size} -> {best.size} 字节 ({best.mime_type})")

        # 3. PNG压缩效果不理想时尝试转换为JPEG
        if self._should_fallback(source, best):
            logger.debug("PNG压缩效果不理想，尝试转换为JPEG")
            candidate = await self._run_flatten(source, quality)
            if candidate.size < best.size:
                logger.debug(f"使用转换后的JPEG版本: {candidate.size} 字节")
                best = candidate
            else:
                logger.debug(f"JPEG版本 {candidate.size} 字节未更小，保留常规压缩结果")
        else:
            logger.debug("跳过PNG转JPEG")

        # 4. 保证结果不大于原图
        if best.size >= source.size:
            logger.info(f"压缩后文件仍然不小于原图 ({best.size} >= {source.size} 字节)，使用原始文件")
            return CompressionOutcome.unchanged(source)

        logger.info(
            f"压缩完成: {source.size} -> {best.size} 字节, "
            f"压缩率: {compression_ratio(source.size, best.size)}%"
        )
        return best

    def _should_fallback(self, source: SourceImage, primary: CompressionOutcome) -> bool:
        """PNG且压缩后仍大于原图的 fallback_ratio 时触发转换"""
        return source.is_png and primary.size > source.size * self.fallback_ratio

    async def _run_reencode(
        self, source: SourceImage, config: EncodingConfig
    ) -> CompressionOutcome:
        try:
            return await self.reencoder.reencode(source.content, source.mime_type, config)
        except CompressionFailedError:
            raise
        except Exception as e:
            logger.error(f"重新编码失败: {e}")
            raise CompressionFailedError(f"重新编码失败: {e}") from e

    async def _run_flatten(self, source: SourceImage, quality: float) -> CompressionOutcome:
        try:
            return await self.flattener.flatten(source.content, quality)
        except CompressionFailedError:
            raise
        except Exception as e:
            logger.error(f"平铺转换失败: {e}")
            raise CompressionFailedError(f"平铺转换失败: {e}") from e
