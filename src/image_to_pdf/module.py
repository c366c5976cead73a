from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import numpy as np

from .composite import UnsupportedLayoutError, composite
from .contracts import (
    DPI,
    BatchResult,
    EmitterName,
    ImageToPdfConfig,
    ImageToPdfError,
    ImageToPdfResult,
    PixelBuffer,
)
from .decode import DecodeError, open_image
from .engines import DocumentEmitter, PillowEmitter, Pypdfium2Emitter
from .grayscale import grayscale_reduce

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


def output_path_for(image_file: Path) -> Path:
    """
    Same directory and stem, suffix replaced by `.pdf` (added when there is none).
    """
    return image_file.with_suffix(PDF_SUFFIX)


def alpha_factor(alpha_percent: int) -> float:
    # Computed in float32 so the factor is the same value the blend arithmetic uses.
    return float(np.float32(alpha_percent) / np.float32(100.0))


def process_image(
    buffer: PixelBuffer, *, to_gray: bool, alpha_percent: int
) -> tuple[PixelBuffer, list[str]]:
    """
    Fixed-order pixel pipeline: grayscale (if requested), then composite (if alpha_percent < 100).

    Returns the processed buffer and the names of the steps that were applied.
    """

    steps: list[str] = []
    output = buffer

    if to_gray:
        output = grayscale_reduce(output)
        steps.append("grayscale")

    if alpha_percent < 100:
        output = composite(output, alpha_factor(alpha_percent))
        steps.append("composite")

    return output, steps


def _get_emitter(engine: EmitterName) -> DocumentEmitter:
    if engine == EmitterName.PYPDFIUM2:
        return Pypdfium2Emitter()
    if engine == EmitterName.PILLOW:
        return PillowEmitter()
    raise ValueError(f"Unsupported document emitter: {engine}")


def _failed(
    *,
    config: ImageToPdfConfig,
    image_file: Path,
    steps: list[str],
    error: ImageToPdfError,
    meta: dict[str, Any],
) -> ImageToPdfResult:
    return ImageToPdfResult(
        ok=False,
        source_image=str(image_file),
        output_pdf=None,
        engine=config.engine,
        steps=steps,
        page={},
        errors=[error],
        meta=meta,
    )


def run_image_to_pdf(*, config: ImageToPdfConfig, image_file: Path) -> ImageToPdfResult:
    """
    Decode one image, run the pixel pipeline and write `<stem>.pdf` next to it.

    Expected failures (decode, unsupported layout, write) are reported in the
    result with `ok=False`; nothing is retried.
    """

    meta: dict[str, Any] = {"to_gray": config.to_gray, "alpha_percent": config.alpha_percent}
    emitter = _get_emitter(config.engine)

    try:
        decoded = open_image(image_file)
    except DecodeError as e:
        return _failed(
            config=config,
            image_file=image_file,
            steps=[],
            error=ImageToPdfError(
                code="IMAGE_TO_PDF_DECODE_FAILED",
                message="Input is not a readable image",
                detail={"reason": e.reason},
            ),
            meta=meta,
        )
    meta["decoded_layout"] = decoded.layout.value

    try:
        processed, steps = process_image(
            decoded, to_gray=config.to_gray, alpha_percent=config.alpha_percent
        )
    except UnsupportedLayoutError as e:
        return _failed(
            config=config,
            image_file=image_file,
            steps=["grayscale"] if config.to_gray else [],
            error=ImageToPdfError(
                code="IMAGE_TO_PDF_UNSUPPORTED_LAYOUT",
                message="Unsupported pixel layout for alpha blending",
                detail={"layout": e.layout.value},
            ),
            meta=meta,
        )

    out_file = output_path_for(image_file)
    try:
        emitted = emitter.emit(buffer=processed, out_file=out_file, title=str(image_file), dpi=DPI)
    except OSError as e:
        return _failed(
            config=config,
            image_file=image_file,
            steps=steps,
            error=ImageToPdfError(
                code="IMAGE_TO_PDF_WRITE_FAILED",
                message="Failed to write output document",
                detail={"output_pdf": str(out_file), "error": repr(e)},
            ),
            meta=meta,
        )

    meta["backend_version"] = emitter.backend_version()
    return ImageToPdfResult(
        ok=True,
        source_image=str(image_file),
        output_pdf=str(emitted.out_file),
        engine=config.engine,
        steps=steps,
        page={
            "width_px": processed.width,
            "height_px": processed.height,
            "width_pt": emitted.width_pt,
            "height_pt": emitted.height_pt,
            "dpi": DPI,
            "layout": processed.layout.value,
        },
        errors=[],
        meta=meta,
    )


def run_image_to_pdf_batch(*, config: ImageToPdfConfig, image_files: Iterable[Path]) -> BatchResult:
    """
    Convert files one after another, stopping at the first failure.

    Files after a failing one are not attempted and are listed in `skipped`.
    """

    pending = list(image_files)
    results: list[ImageToPdfResult] = []

    for idx, image_file in enumerate(pending):
        result = run_image_to_pdf(config=config, image_file=image_file)
        results.append(result)
        if not result.ok:
            err = result.errors[0]
            logger.error("%s: %s (%s)", image_file, err.message, err.code)
            return BatchResult(ok=False, results=results, skipped=[str(p) for p in pending[idx + 1 :]])
        logger.info("Wrote %s", result.output_pdf)

    return BatchResult(ok=True, results=results, skipped=[])
