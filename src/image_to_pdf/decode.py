from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .contracts import PixelBuffer, PixelLayout
from .imaging import pil_to_buffer

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to decode {path}: {reason}")
        self.path = path
        self.reason = reason


def _has_16bit_samples(im: Image.Image) -> bool:
    """
    True when Pillow will narrow multi-channel 16-bit samples (e.g. a 48-bit PNG read as "RGB").

    Checked on the unloaded tile descriptors: their raw mode carries the stored depth ("RGB;16B").
    """
    if im.mode != "RGB":
        return False
    return any(";16" in str(tile[3]) for tile in im.tile)


def _read_rgb16(path: Path) -> PixelBuffer | None:
    bgr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if bgr is None or bgr.dtype != np.uint16 or bgr.ndim != 3 or bgr.shape[2] != 3:
        return None
    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    return PixelBuffer(pixels=np.ascontiguousarray(rgb), layout=PixelLayout.RGB16)


def open_image(path: Path) -> PixelBuffer:
    """
    Decode an image file fully into memory.

    All-or-nothing: any failure (missing file, unknown format, truncated data,
    oversized image, unsupported mode) raises DecodeError. 16-bit RGB sources are
    read at full depth with OpenCV, since Pillow has no 48-bit mode.
    """

    try:
        with Image.open(path) as im:
            wide = _has_16bit_samples(im)
            im.load()
            buffer = pil_to_buffer(im)
    except FileNotFoundError as e:
        raise DecodeError(path, "file not found") from e
    except UnidentifiedImageError as e:
        raise DecodeError(path, "unrecognized image format") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(path, str(e)) from e
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeError(path, str(e) or type(e).__name__) from e

    if wide:
        rgb16 = _read_rgb16(path)
        if rgb16 is not None:
            buffer = rgb16

    logger.debug("Decoded %s: %dx%d %s", path, buffer.width, buffer.height, buffer.layout.value)
    return buffer
