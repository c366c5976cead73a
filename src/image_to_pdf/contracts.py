from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

# Fixed output density: page size in points = pixels * 72 / DPI.
DPI: float = 300.0

# Upper bound of the --alpha option (an unsigned byte); anything >= 100 means "unchanged".
MAX_ALPHA_PERCENT = 255


class PixelLayout(str, Enum):
    """
    Channel count + sample type of a decoded pixel buffer.

    Only LUMA8, RGB8 and RGB16 can be composited; the remaining members exist
    so decoder output is always tagged and can be rejected explicitly.
    """

    LUMA8 = "luma8"
    RGB8 = "rgb8"
    RGB16 = "rgb16"
    LUMA16 = "luma16"
    LUMA_ALPHA8 = "luma_alpha8"
    RGBA8 = "rgba8"
    CMYK8 = "cmyk8"
    INT32 = "int32"
    FLOAT32 = "float32"

    @property
    def channels(self) -> int:
        return _LAYOUT_SPECS[self][0]

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_LAYOUT_SPECS[self][1])

    @property
    def alpha_channel(self) -> int | None:
        return _LAYOUT_SPECS[self][2]


# layout -> (channels, dtype, index of transparency channel)
_LAYOUT_SPECS: dict[PixelLayout, tuple[int, str, int | None]] = {
    PixelLayout.LUMA8: (1, "uint8", None),
    PixelLayout.RGB8: (3, "uint8", None),
    PixelLayout.RGB16: (3, "uint16", None),
    PixelLayout.LUMA16: (1, "uint16", None),
    PixelLayout.LUMA_ALPHA8: (2, "uint8", 1),
    PixelLayout.RGBA8: (4, "uint8", 3),
    PixelLayout.CMYK8: (4, "uint8", None),
    PixelLayout.INT32: (1, "int32", None),
    PixelLayout.FLOAT32: (1, "float32", None),
}

# Inference order matters: CMYK8 shares (4, uint8) with RGBA8 and is never inferred.
_INFERABLE_LAYOUTS = (
    PixelLayout.LUMA8,
    PixelLayout.RGB8,
    PixelLayout.RGB16,
    PixelLayout.LUMA16,
    PixelLayout.LUMA_ALPHA8,
    PixelLayout.RGBA8,
    PixelLayout.INT32,
    PixelLayout.FLOAT32,
)


@dataclass(frozen=True, slots=True, eq=False)
class PixelBuffer:
    """
    Rectangular pixel grid: `(height, width)` for one channel, `(height, width, channels)` otherwise.
    """

    pixels: np.ndarray
    layout: PixelLayout

    def __post_init__(self) -> None:
        expected_ndim = 2 if self.layout.channels == 1 else 3
        if self.pixels.ndim != expected_ndim:
            raise ValueError(
                f"{self.layout.value} expects a {expected_ndim}-D array, got shape {self.pixels.shape}"
            )
        if expected_ndim == 3 and self.pixels.shape[2] != self.layout.channels:
            raise ValueError(
                f"{self.layout.value} expects {self.layout.channels} channels, got {self.pixels.shape[2]}"
            )
        if self.pixels.dtype != self.layout.dtype:
            raise ValueError(f"{self.layout.value} expects dtype {self.layout.dtype}, got {self.pixels.dtype}")

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> PixelBuffer:
        channels = 1 if pixels.ndim == 2 else (pixels.shape[2] if pixels.ndim == 3 else -1)
        for layout in _INFERABLE_LAYOUTS:
            if layout.channels == channels and layout.dtype == pixels.dtype:
                return cls(pixels=pixels, layout=layout)
        raise ValueError(f"Cannot infer pixel layout for shape={pixels.shape} dtype={pixels.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return self.layout.channels

    @property
    def sample_max(self) -> int:
        return int(np.iinfo(self.layout.dtype).max)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.layout == other.layout and np.array_equal(self.pixels, other.pixels)


class EmitterName(str, Enum):
    """
    Document container backends.
    """

    PYPDFIUM2 = "pypdfium2"
    PILLOW = "pillow"


@dataclass(frozen=True, slots=True)
class ImageToPdfError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ImageToPdfResult:
    ok: bool
    source_image: str
    output_pdf: str | None
    engine: EmitterName
    steps: list[str]  # applied pixel steps, in order: "grayscale", "composite"
    page: dict[str, Any]  # {"width_px", "height_px", "width_pt", "height_pt", "dpi", "layout"}
    errors: list[ImageToPdfError]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class BatchResult:
    ok: bool
    results: list[ImageToPdfResult]
    # Inputs never attempted because an earlier file failed.
    skipped: list[str]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ImageToPdfConfig:
    """
    Per-run pixel pipeline configuration.

    - grayscale (if requested) always runs before compositing
    - alpha_percent >= 100 skips compositing entirely
    - no environment variable reads; output density is the fixed `DPI`
    """

    to_gray: bool = False
    alpha_percent: int = 100
    engine: EmitterName = EmitterName.PILLOW

    def __post_init__(self) -> None:
        if isinstance(self.alpha_percent, bool) or not isinstance(self.alpha_percent, int):
            raise TypeError("alpha_percent must be an integer")
        if not (0 <= self.alpha_percent <= MAX_ALPHA_PERCENT):
            raise ValueError(f"alpha_percent must be within [0, {MAX_ALPHA_PERCENT}]")
        if not isinstance(self.engine, EmitterName):
            raise TypeError("engine must be an EmitterName")
