from __future__ import annotations

from pathlib import Path

from ..contracts import PixelBuffer

from .base import DocumentEmitter, EmittedDocument, embeddable_image, pixels_to_points, write_atomically


class Pypdfium2Emitter(DocumentEmitter):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except Exception:
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError(
                "Missing dependency: pypdfium2 is required for PDF emission."
            ) from e

    def emit(self, *, buffer: PixelBuffer, out_file: Path, title: str, dpi: float) -> EmittedDocument:
        # Note: pdfium exposes no setter for the Info dictionary, so `title` is not embedded.
        _ = title

        pdfium = self._require_pdfium()
        width_pt = pixels_to_points(buffer.width, dpi)
        height_pt = pixels_to_points(buffer.height, dpi)

        pdf = pdfium.PdfDocument.new()
        try:
            bitmap = pdfium.PdfBitmap.from_pil(embeddable_image(buffer))
            image = pdfium.PdfImage.new(pdf)
            image.set_bitmap(bitmap)
            bitmap.close()

            # Image objects are drawn into the unit square; scale it up to the full page.
            image.set_matrix(pdfium.PdfMatrix().scale(width_pt, height_pt))

            page = pdf.new_page(width_pt, height_pt)
            page.insert_obj(image)
            page.gen_content()
            page.close()

            write_atomically(out_file, lambda tmp: pdf.save(str(tmp)))
        finally:
            pdf.close()

        return EmittedDocument(out_file=out_file, width_pt=width_pt, height_pt=height_pt)
