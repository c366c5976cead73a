from __future__ import annotations

from pathlib import Path

from ..contracts import PixelBuffer

from .base import DocumentEmitter, EmittedDocument, embeddable_image, pixels_to_points, write_atomically


class PillowEmitter(DocumentEmitter):
    def backend_id(self) -> str:
        return "pillow"

    def backend_version(self) -> str | None:
        try:
            import PIL

            return getattr(PIL, "__version__", None)
        except Exception:
            return None

    def emit(self, *, buffer: PixelBuffer, out_file: Path, title: str, dpi: float) -> EmittedDocument:
        pil_img = embeddable_image(buffer)

        # Pillow derives the page size from `resolution`: pixels * 72 / resolution.
        write_atomically(
            out_file,
            lambda tmp: pil_img.save(tmp, format="PDF", resolution=dpi, title=title),
        )

        return EmittedDocument(
            out_file=out_file,
            width_pt=pixels_to_points(buffer.width, dpi),
            height_pt=pixels_to_points(buffer.height, dpi),
        )
