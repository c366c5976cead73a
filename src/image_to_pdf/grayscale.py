from __future__ import annotations

import numpy as np

from .contracts import PixelBuffer, PixelLayout
from .imaging import buffer_to_pil


def grayscale_reduce(buffer: PixelBuffer) -> PixelBuffer:
    """
    Collapse any layout to single-channel 8-bit luminance.

    Weighting is Pillow's "L" conversion (ITU-R 601-2 luma:
    L = R * 299/1000 + G * 587/1000 + B * 114/1000). 16-bit inputs are narrowed
    to 8 bits first; transparency is dropped, not composited.
    Total over every layout; dimensions are preserved and the input is not modified.
    """

    luma = buffer_to_pil(buffer).convert("L")
    return PixelBuffer(pixels=np.array(luma, dtype=np.uint8), layout=PixelLayout.LUMA8)
