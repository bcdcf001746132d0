# -*- coding: utf-8 -*-
import io
import os

import pytest
from PIL import Image

from image_compressor.compression.models import CompressionOutcome
from image_compressor.compression.strategy import FlattenStrategy, ReencodeStrategy


def encode(img: Image.Image, fmt: str, **params) -> bytes:
    output = io.BytesIO()
    img.save(output, format=fmt, **params)
    return output.getvalue()


def noise_image(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """随机噪声图，几乎无法被无损压缩"""
    channels = len(mode)
    return Image.frombytes(mode, (width, height), os.urandom(width * height * channels))


class FakeReencoder(ReencodeStrategy):
    """返回固定大小结果的重新编码能力"""

    def __init__(self, size: int, mime_type: str = "image/png", error: Exception = None):
        self.size = size
        self.mime_type = mime_type
        self.error = error
        self.calls = []

    async def reencode(self, content, mime_type, config):
        self.calls.append((content, mime_type, config))
        if self.error is not None:
            raise self.error
        return CompressionOutcome(content=b"p", size=self.size, mime_type=self.mime_type)


class FakeFlattener(FlattenStrategy):
    """返回固定大小结果的平铺转换能力"""

    def __init__(self, size: int, error: Exception = None):
        self.size = size
        self.error = error
        self.calls = []

    async def flatten(self, content, quality):
        self.calls.append((content, quality))
        if self.error is not None:
            raise self.error
        return CompressionOutcome(
            content=b"f", size=self.size, mime_type="image/jpeg", source="fallback"
        )


@pytest.fixture
def png_bytes():
    return encode(Image.new("RGBA", (64, 64), (10, 20, 30, 128)), "PNG")


@pytest.fixture
def jpeg_bytes():
    return encode(Image.new("RGB", (64, 64), (200, 100, 50)), "JPEG", quality=90)
