# -*- coding: utf-8 -*-
"""AstrBot 图片压缩插件 - 按质量自适应压缩用户发送的图片"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

from astrbot.api import AstrBotConfig, logger
from astrbot.api.event import filter, AstrMessageEvent
from astrbot.api.message_components import Image as CompImage, Plain
from astrbot.api.star import Context, Star, register

from image_compressor.compression import CompressionManager, CompressionOutcome, SourceImage
from image_compressor.compression.models import OUTCOME_FALLBACK, OUTCOME_ORIGINAL
from image_compressor.config import PluginConfig
from image_compressor.exceptions import (
    CompressionFailedError,
    DownloadError,
    UnsupportedInputError,
)
from image_compressor.image_downloader import ImageDownloader
from image_compressor.image_loader import load_source
from image_compressor.utils import compressed_filename, compression_ratio, format_size


@register(
    "image_compressor",
    "Cline",
    "根据质量设置自适应压缩图片，PNG压缩效果不佳时自动转换为JPEG，结果不会大于原图",
    "1.0.0",
    "https://github.com/your-repo/astrbot_plugin_image_compressor",
)
class ImageCompressorPlugin(Star):
    """图片压缩插件"""

    def __init__(self, context: Context, config: AstrBotConfig = None):
        super().__init__(context)
        self.config = PluginConfig(config)
        self.downloader = ImageDownloader(timeout=self.config.download_timeout)
        self.manager = CompressionManager(fallback_ratio=self.config.fallback_ratio)

        logger.info("图片压缩插件已加载")

    async def _read_image(self, img: CompImage) -> Tuple[bytes, Optional[str], str]:
        """
        读取消息中的图片

        Args:
            img: 消息链中的图片组件

        Returns:
            (图片内容, 声明的MIME类型, 文件名)
        """
        if img.url:
            content, mime_type = await self.downloader.download_image(img.url)
            name = Path(img.url.split("?")[0]).name or "image"
            # 聊天平台常返回 application/octet-stream，只信任图片类型
            if mime_type and not mime_type.startswith("image/"):
                mime_type = None
            return content, mime_type, name

        if getattr(img, "file", None):
            path = Path(img.file.removeprefix("file://"))
            try:
                content = await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                logger.error(f"读取本地图片失败: {e}")
                raise UnsupportedInputError(f"读取本地图片失败: {e}") from e
            return content, None, path.name

        raise UnsupportedInputError("图片没有可用的地址")

    def _build_summary(
        self, source: SourceImage, outcome: CompressionOutcome, filename: str
    ) -> str:
        """生成回复文本"""
        lines = [
            f"原始大小: {format_size(source.size)}",
            f"压缩后: {format_size(outcome.size)}",
        ]
        if self.config.show_ratio:
            lines.append(f"压缩率: {compression_ratio(source.size, outcome.size)}%")
        if outcome.source == OUTCOME_ORIGINAL:
            lines.append("压缩后文件仍然更大，已保留原图")
        elif outcome.source == OUTCOME_FALLBACK:
            lines.append("PNG压缩效果不理想，已转换为JPEG")
        lines.append(f"文件名: {filename}")
        return "\n".join(lines)

    @filter.command("压缩")
    async def compress(self, event: AstrMessageEvent, quality: Optional[int] = None):
        """压缩消息中的图片，用法：/压缩 [质量1-100]"""
        message_chain = event.message_obj.message
        images: List[CompImage] = [msg for msg in message_chain if isinstance(msg, CompImage)]

        if not images:
            yield event.plain_result(
                f"请在发送指令的同时附带图片，例如：/压缩 {self.config.default_quality}"
            )
            return

        try:
            fraction = self.config.quality_fraction(quality)
        except (TypeError, ValueError):
            yield event.plain_result("质量必须是 1-100 之间的数字，例如：/压缩 80")
            return
        logger.debug(f"收到压缩请求: {len(images)} 张图片, 质量 {fraction}")

        for img in images:
            try:
                content, mime_type, name = await self._read_image(img)
                source = load_source(
                    content,
                    mime_type=mime_type,
                    name=name,
                    max_size=self.config.max_input_size,
                )
                outcome = await self.manager.compress(source, fraction)
            except UnsupportedInputError:
                yield event.plain_result("请上传图片文件！")
                continue
            except DownloadError:
                yield event.plain_result("图片下载失败，请重试！")
                continue
            except CompressionFailedError:
                yield event.plain_result("图片压缩失败，请重试！")
                continue

            filename = compressed_filename(source.name, outcome.mime_type)
            yield event.chain_result(
                [
                    Plain(self._build_summary(source, outcome, filename)),
                    CompImage.fromBytes(outcome.content),
                ]
            )

    async def terminate(self):
        """插件卸载时调用"""
        await self.downloader.close()
        logger.info("图片压缩插件已卸载")
