# -*- coding: utf-8 -*-
import asyncio
import io

import pytest
from PIL import Image

from conftest import encode, noise_image
from image_compressor.compression.config import EncodingConfig
from image_compressor.compression.strategy import (
    PillowReencoder,
    WhiteBackgroundFlattener,
    flatten_image,
    to_pil_quality,
)
from image_compressor.exceptions import CompressionFailedError


def reencode(content, mime_type, **config):
    config.setdefault("target_size_mb", 0.9)
    config.setdefault("target_quality", 0.8)
    return asyncio.run(PillowReencoder().reencode(content, mime_type, EncodingConfig(**config)))


def open_outcome(outcome):
    return Image.open(io.BytesIO(outcome.content))


def test_longest_side_is_capped():
    content = encode(Image.new("RGB", (4000, 1000), (120, 130, 140)), "JPEG")

    outcome = reencode(content, "image/jpeg")

    with open_outcome(outcome) as img:
        assert img.size == (1920, 480)
        assert img.format == "JPEG"


def test_small_image_keeps_dimensions():
    content = encode(Image.new("RGB", (640, 480), (1, 2, 3)), "JPEG")

    with open_outcome(reencode(content, "image/jpeg")) as img:
        assert img.size == (640, 480)


def test_png_over_conversion_threshold_becomes_jpeg():
    content = encode(noise_image(200, 200), "PNG")
    assert len(content) > 100 * 1024

    outcome = reencode(content, "image/png", conversion_size_threshold_kb=100)

    assert outcome.mime_type == "image/jpeg"
    with open_outcome(outcome) as img:
        assert img.format == "JPEG"


def test_png_under_conversion_threshold_stays_png(png_bytes):
    outcome = reencode(png_bytes, "image/png", conversion_size_threshold_kb=100)

    assert outcome.mime_type == "image/png"
    with open_outcome(outcome) as img:
        assert img.format == "PNG"


def test_webp_keeps_format():
    content = encode(Image.new("RGB", (32, 32), (5, 5, 5)), "WEBP")

    assert reencode(content, "image/webp").mime_type == "image/webp"


def test_other_formats_are_written_as_jpeg():
    content = encode(Image.new("RGB", (32, 32), (5, 5, 5)), "BMP")

    assert reencode(content, "image/bmp").mime_type == "image/jpeg"


def test_more_iterations_reach_smaller_output():
    content = encode(noise_image(300, 300), "JPEG", quality=95)

    single = reencode(content, "image/jpeg", target_size_mb=0.001, max_iterations=1)
    several = reencode(content, "image/jpeg", target_size_mb=0.001, max_iterations=6)

    assert several.size < single.size


def test_png_iterations_shrink_dimensions():
    content = encode(noise_image(200, 200), "PNG")

    outcome = reencode(
        content, "image/png", target_size_mb=0.001, target_quality=1.0, max_iterations=3
    )

    with open_outcome(outcome) as img:
        assert img.size == (162, 162)


def test_iterations_stop_once_target_is_met():
    content = encode(Image.new("RGB", (100, 100), (9, 9, 9)), "PNG")

    outcome = reencode(content, "image/png", target_quality=1.0, max_iterations=10)

    with open_outcome(outcome) as img:
        assert img.size == (100, 100)


def test_outcome_size_matches_content(jpeg_bytes):
    outcome = reencode(jpeg_bytes, "image/jpeg")

    assert outcome.size == len(outcome.content)
    assert outcome.source == "primary"


def test_undecodable_input_raises():
    with pytest.raises(CompressionFailedError):
        reencode(b"definitely not an image", "image/png")


def test_flatten_paints_transparency_white():
    content = encode(Image.new("RGBA", (20, 10), (0, 0, 0, 0)), "PNG")

    outcome = asyncio.run(WhiteBackgroundFlattener().flatten(content, 0.9))

    assert outcome.mime_type == "image/jpeg"
    assert outcome.source == "fallback"
    with open_outcome(outcome) as img:
        assert img.size == (20, 10)
        assert img.mode == "RGB"
        assert all(channel >= 250 for channel in img.getpixel((5, 5)))


def test_flatten_keeps_opaque_pixels():
    content = encode(Image.new("RGBA", (20, 20), (200, 0, 0, 255)), "PNG")

    outcome = asyncio.run(WhiteBackgroundFlattener().flatten(content, 0.9))

    with open_outcome(outcome) as img:
        red, green, blue = img.getpixel((10, 10))
        assert red > 180 and green < 30 and blue < 30


def test_flatten_palette_image_with_transparency():
    img = Image.new("P", (8, 8), 0)
    img.putpalette([0, 0, 0] * 256)
    img.info["transparency"] = 0

    flattened = flatten_image(img)

    assert flattened.mode == "RGB"
    assert flattened.getpixel((0, 0)) == (255, 255, 255)


def test_flatten_failure_raises():
    with pytest.raises(CompressionFailedError):
        asyncio.run(WhiteBackgroundFlattener().flatten(b"", 0.5))


@pytest.mark.parametrize(
    "quality, expected", [(0.0, 1), (0.005, 1), (0.6, 60), (0.955, 95), (1.0, 95)]
)
def test_to_pil_quality(quality, expected):
    assert to_pil_quality(quality) == expected


def test_exif_orientation_is_applied_after_decode():
    exif = Image.Exif()
    exif[0x0112] = 6
    content = encode(Image.new("RGB", (40, 20), (30, 60, 90)), "JPEG", exif=exif)

    with open_outcome(reencode(content, "image/jpeg")) as img:
        assert img.size == (20, 40)
