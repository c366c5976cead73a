from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PIL import Image

from ..contracts import PixelBuffer
from ..imaging import buffer_to_pil

POINTS_PER_INCH = 72.0

_GRAY_MODES = ("L", "LA", "I", "F")


@dataclass(frozen=True, slots=True)
class EmittedDocument:
    out_file: Path  # absolute output file path
    width_pt: float
    height_pt: float


def pixels_to_points(pixels: int, dpi: float) -> float:
    return pixels * POINTS_PER_INCH / dpi


def embeddable_image(buffer: PixelBuffer) -> Image.Image:
    """
    8-bit "L" or "RGB" Pillow image for embedding; gray layouts stay gray, everything else becomes RGB.

    RGB16 results are embedded at 8 bits per sample (`v // 257`): neither Pillow's
    PDF writer nor pdfium bitmaps carry 16-bit samples. Compositing itself still
    runs at full 16-bit depth.
    """

    pil_img = buffer_to_pil(buffer)
    if pil_img.mode in ("L", "RGB"):
        return pil_img
    return pil_img.convert("L" if pil_img.mode in _GRAY_MODES else "RGB")


def write_atomically(out_file: Path, write: Callable[[Path], None]) -> None:
    """
    Write to a sibling temp file, then rename over `out_file`.

    A failed write leaves no partial document behind; an existing file is
    replaced only once the new one is complete.
    """

    tmp_file = out_file.with_name(f".{out_file.name}.tmp")
    try:
        write(tmp_file)
        os.replace(tmp_file, out_file)
    except BaseException:
        tmp_file.unlink(missing_ok=True)
        raise


class DocumentEmitter(ABC):
    """
    Single-page document container backend.

    Emitters must:
    - produce exactly one page sized to the image at the given density
    - place the image so it fills the whole page
    - write all-or-nothing (see `write_atomically`)
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def emit(self, *, buffer: PixelBuffer, out_file: Path, title: str, dpi: float) -> EmittedDocument:
        raise NotImplementedError
