"""
Image -> single-page PDF conversion.

Pipeline per input file, in this fixed order:
- decode (Pillow) into a tagged `PixelBuffer`
- optional grayscale reduction to 8-bit luminance
- optional alpha compositing toward white (LUMA8, RGB8, RGB16 only)
- embed at 300 DPI into a one-page PDF next to the input
"""

from .composite import UnsupportedLayoutError, blend_sample, composite
from .contracts import (
    DPI,
    BatchResult,
    EmitterName,
    ImageToPdfConfig,
    ImageToPdfError,
    ImageToPdfResult,
    PixelBuffer,
    PixelLayout,
)
from .decode import DecodeError, open_image
from .grayscale import grayscale_reduce
from .module import process_image, run_image_to_pdf, run_image_to_pdf_batch

__all__ = [
    "DPI",
    "BatchResult",
    "DecodeError",
    "EmitterName",
    "ImageToPdfConfig",
    "ImageToPdfError",
    "ImageToPdfResult",
    "PixelBuffer",
    "PixelLayout",
    "UnsupportedLayoutError",
    "blend_sample",
    "composite",
    "grayscale_reduce",
    "open_image",
    "process_image",
    "run_image_to_pdf",
    "run_image_to_pdf_batch",
]
