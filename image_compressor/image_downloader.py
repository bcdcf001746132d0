# -*- coding: utf-8 -*-
"""
图片下载模块
"""

import asyncio
from typing import Optional, Tuple

import aiohttp

from astrbot.api import logger

from image_compressor.exceptions import DownloadError


class ImageDownloader:
    """图片下载器"""

    def __init__(self, timeout: float = 30):
        """
        初始化图片下载器

        Args:
            timeout: 下载超时（秒）
        """
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        获取或创建共享的 HTTP 会话

        Returns:
            aiohttp.ClientSession 实例
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """关闭 HTTP 会话，释放资源"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def download_image(self, url: str) -> Tuple[bytes, Optional[str]]:
        """
        下载图片

        Args:
            url: 图片URL

        Returns:
            (图片内容, 响应声明的MIME类型)，未声明类型时为 None

        Raises:
            DownloadError: 网络错误或状态码不是 200
        """
        try:
            session = await self._get_session()
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with session.get(url, timeout=timeout) as resp:
                if resp.status != 200:
                    logger.warning(f"下载图片失败，状态码: {resp.status}, URL: {url}")
                    raise DownloadError(f"下载图片失败，状态码: {resp.status}")
                content = await resp.read()
                mime_type = resp.content_type if "Content-Type" in resp.headers else None
                logger.debug(f"成功下载图片: {url}, 大小: {len(content)} 字节")
                return content, mime_type
        except DownloadError:
            raise
        except aiohttp.ClientError as e:
            logger.error(f"网络请求失败 {url}: {e}")
            raise DownloadError(f"下载图片失败: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"下载图片超时 {url}: {e}")
            raise DownloadError(f"下载图片超时: {e}") from e
