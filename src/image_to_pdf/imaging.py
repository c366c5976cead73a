"""
Bridge between `PixelBuffer` and Pillow images.

Pillow only models 8-bit multi-channel images, so 16-bit buffers are narrowed
on the way out (`v // 257`, which maps 65535 -> 255 and 0 -> 0).
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from .contracts import PixelBuffer, PixelLayout

_MODE_TO_LAYOUT: dict[str, PixelLayout] = {
    "L": PixelLayout.LUMA8,
    "RGB": PixelLayout.RGB8,
    "LA": PixelLayout.LUMA_ALPHA8,
    "RGBA": PixelLayout.RGBA8,
    "CMYK": PixelLayout.CMYK8,
    "I": PixelLayout.INT32,
    "F": PixelLayout.FLOAT32,
}

# Bilevel and palette images are expanded before tagging.
_MODE_EXPANSION: dict[str, str] = {
    "1": "L",
    "P": "RGB",
    "PA": "RGBA",
}


def pil_to_buffer(pil_img: Image.Image) -> PixelBuffer:
    """
    Tag a Pillow image with its `PixelLayout` and copy its samples into a numpy array.

    Raises ValueError for Pillow modes with no layout (e.g. YCbCr, HSV, LAB).
    """

    mode = pil_img.mode
    if mode in _MODE_EXPANSION:
        if mode == "P" and "transparency" in pil_img.info:
            target = "RGBA"
        else:
            target = _MODE_EXPANSION[mode]
        pil_img = pil_img.convert(target)
        mode = target

    if mode.startswith("I;16"):
        # I;16, I;16L, I;16B: numpy picks up the byte order from the array interface.
        return PixelBuffer(pixels=np.asarray(pil_img).astype(np.uint16), layout=PixelLayout.LUMA16)

    layout = _MODE_TO_LAYOUT.get(mode)
    if layout is None:
        raise ValueError(f"Unsupported image mode: {mode!r}")
    return PixelBuffer(pixels=np.array(pil_img, dtype=layout.dtype), layout=layout)


def narrow_to_8bit(samples: np.ndarray) -> np.ndarray:
    return (samples // 257).astype(np.uint8)


def buffer_to_pil(buffer: PixelBuffer) -> Image.Image:
    """
    Build a Pillow image carrying the same samples (16-bit layouts narrowed to 8 bits).
    """

    if buffer.layout in (PixelLayout.RGB16, PixelLayout.LUMA16):
        return Image.fromarray(narrow_to_8bit(buffer.pixels))
    if buffer.layout == PixelLayout.CMYK8:
        # A (H, W, 4) uint8 array is read as RGBA unless the mode is forced.
        return Image.frombytes("CMYK", (buffer.width, buffer.height), buffer.pixels.tobytes())
    return Image.fromarray(buffer.pixels)
