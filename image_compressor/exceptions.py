# -*- coding: utf-8 -*-
"""
图片压缩插件异常定义
"""


class ImageCompressorError(Exception):
    """图片压缩插件基础异常类"""
    pass


class UnsupportedInputError(ImageCompressorError):
    """输入不是可解码的图片"""
    pass


class CompressionFailedError(ImageCompressorError):
    """重新编码或平铺转换失败"""
    pass


class DownloadError(ImageCompressorError):
    """图片下载异常"""
    pass
