from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import numpy as np
import pypdfium2 as pdfium

from image_to_pdf.contracts import DPI, PixelBuffer, PixelLayout
from image_to_pdf.engines import PillowEmitter, Pypdfium2Emitter
from image_to_pdf.engines.base import embeddable_image, pixels_to_points, write_atomically


def _page_sizes(pdf_file: Path) -> list[tuple[float, float]]:
    doc = pdfium.PdfDocument(str(pdf_file))
    try:
        return [doc[i].get_size() for i in range(len(doc))]
    finally:
        doc.close()


class TestEmitters(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _buffers(self) -> list[PixelBuffer]:
        return [
            PixelBuffer(pixels=np.full((90, 150), 128, dtype=np.uint8), layout=PixelLayout.LUMA8),
            PixelBuffer(pixels=np.full((90, 150, 3), 64, dtype=np.uint8), layout=PixelLayout.RGB8),
            PixelBuffer(pixels=np.full((90, 150, 3), 40000, dtype=np.uint16), layout=PixelLayout.RGB16),
            PixelBuffer(pixels=np.full((90, 150, 4), 200, dtype=np.uint8), layout=PixelLayout.RGBA8),
        ]

    def test_single_page_sized_at_dpi(self) -> None:
        for emitter in (Pypdfium2Emitter(), PillowEmitter()):
            for buf in self._buffers():
                with self.subTest(backend=emitter.backend_id(), layout=buf.layout):
                    out_file = self.tmp / f"{emitter.backend_id()}_{buf.layout.value}.pdf"
                    emitted = emitter.emit(buffer=buf, out_file=out_file, title="t", dpi=DPI)

                    self.assertTrue(out_file.read_bytes().startswith(b"%PDF"))
                    self.assertAlmostEqual(emitted.width_pt, 36.0)
                    self.assertAlmostEqual(emitted.height_pt, 21.6)

                    sizes = _page_sizes(out_file)
                    self.assertEqual(len(sizes), 1)
                    self.assertAlmostEqual(sizes[0][0], 36.0, places=2)
                    self.assertAlmostEqual(sizes[0][1], 21.6, places=2)
                    self.assertEqual(list(self.tmp.glob(".*.tmp")), [])

    def test_overwrites_existing_file(self) -> None:
        out_file = self.tmp / "page.pdf"
        out_file.write_bytes(b"old")
        buf = self._buffers()[0]
        Pypdfium2Emitter().emit(buffer=buf, out_file=out_file, title="t", dpi=DPI)
        self.assertTrue(out_file.read_bytes().startswith(b"%PDF"))

    def test_pixels_to_points(self) -> None:
        self.assertEqual(pixels_to_points(300, 300.0), 72.0)
        self.assertEqual(pixels_to_points(2550, 300.0), 612.0)


class TestEmbeddableImage(unittest.TestCase):
    def test_modes(self) -> None:
        cases = [
            (PixelBuffer(pixels=np.zeros((2, 2), dtype=np.uint8), layout=PixelLayout.LUMA8), "L"),
            (PixelBuffer(pixels=np.zeros((2, 2, 3), dtype=np.uint16), layout=PixelLayout.RGB16), "RGB"),
            (PixelBuffer(pixels=np.zeros((2, 2), dtype=np.uint16), layout=PixelLayout.LUMA16), "L"),
            (PixelBuffer(pixels=np.zeros((2, 2, 2), dtype=np.uint8), layout=PixelLayout.LUMA_ALPHA8), "L"),
            (PixelBuffer(pixels=np.zeros((2, 2, 4), dtype=np.uint8), layout=PixelLayout.RGBA8), "RGB"),
            (PixelBuffer(pixels=np.zeros((2, 2, 4), dtype=np.uint8), layout=PixelLayout.CMYK8), "RGB"),
            (PixelBuffer(pixels=np.zeros((2, 2), dtype=np.float32), layout=PixelLayout.FLOAT32), "L"),
        ]
        for buf, mode in cases:
            with self.subTest(layout=buf.layout):
                self.assertEqual(embeddable_image(buf).mode, mode)

    def test_16bit_narrowed(self) -> None:
        pixels = np.array([[[65535, 0, 257 * 42]]], dtype=np.uint16)
        im = embeddable_image(PixelBuffer(pixels=pixels, layout=PixelLayout.RGB16))
        self.assertEqual(im.getpixel((0, 0)), (255, 0, 42))


class TestWriteAtomically(unittest.TestCase):
    def test_failed_write_leaves_previous_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            out_file = Path(d) / "doc.pdf"
            out_file.write_bytes(b"previous")

            def _boom(tmp: Path) -> None:
                tmp.write_bytes(b"partial")
                raise OSError("disk full")

            with self.assertRaises(OSError):
                write_atomically(out_file, _boom)

            self.assertEqual(out_file.read_bytes(), b"previous")
            self.assertEqual(sorted(p.name for p in Path(d).iterdir()), ["doc.pdf"])


if __name__ == "__main__":
    unittest.main()
