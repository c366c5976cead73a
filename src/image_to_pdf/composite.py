"""
Alpha compositing against an opaque white background.

One per-sample formula (`blend_sample`) is applied to every sample of a
buffer; the sample range and transparency channel come from the buffer's
`PixelLayout`, so LUMA8, RGB8 and RGB16 share the same code path.

Rounding: arithmetic runs in float32 and is narrowed by truncation toward
zero, e.g. factor 0.5 on an 8-bit sample of 100 gives int(127.5 + 50.0) = 177.
"""

from __future__ import annotations

import logging
from typing import Union

import numpy as np

from .contracts import PixelBuffer, PixelLayout

logger = logging.getLogger(__name__)

Samples = Union[int, np.ndarray]


class UnsupportedLayoutError(ValueError):
    def __init__(self, layout: PixelLayout) -> None:
        super().__init__(f"Unsupported pixel layout for alpha blending: {layout.value}")
        self.layout = layout


# The only layouts the compositor is defined for.
BLENDABLE_LAYOUTS: frozenset[PixelLayout] = frozenset(
    {PixelLayout.LUMA8, PixelLayout.RGB8, PixelLayout.RGB16}
)


def blend_sample(sample: Samples, sample_max: int, factor: float) -> np.ndarray:
    """
    (1 - factor) * sample_max + factor * sample, in float32, not yet narrowed.

    Works on a scalar or on a whole array of samples.
    """

    f = np.float32(factor)
    background = (np.float32(1.0) - f) * np.float32(sample_max)
    foreground = f * np.asarray(sample, dtype=np.float32)
    return background + foreground


def _blend_pixels(pixels: np.ndarray, dtype: np.dtype, alpha_channel: int | None, factor: float) -> np.ndarray:
    sample_max = int(np.iinfo(dtype).max)
    # float32 -> unsigned int truncates toward zero; the sum never leaves [0, sample_max].
    out = blend_sample(pixels, sample_max, factor).astype(dtype)
    if alpha_channel is not None:
        out[..., alpha_channel] = sample_max
    return out


def composite(buffer: PixelBuffer, factor: float) -> PixelBuffer:
    """
    Blend every sample of `buffer` toward white, keeping `factor` of the original intensity.

    factor=1.0 is the identity and factor=0.0 yields pure white. Returns a new
    buffer of the same layout and dimensions. Raises UnsupportedLayoutError for
    any layout outside LUMA8/RGB8/RGB16 and ValueError for a factor outside [0, 1].
    """

    if buffer.layout not in BLENDABLE_LAYOUTS:
        raise UnsupportedLayoutError(buffer.layout)
    if not (0.0 <= factor <= 1.0):
        raise ValueError(f"factor must be within [0, 1], got {factor}")

    layout = buffer.layout
    logger.debug("Compositing %s buffer %dx%d with factor %.2f", layout.value, buffer.width, buffer.height, factor)
    pixels = _blend_pixels(buffer.pixels, layout.dtype, layout.alpha_channel, factor)
    return PixelBuffer(pixels=pixels, layout=layout)
