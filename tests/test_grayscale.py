from __future__ import annotations

import unittest

import numpy as np
from PIL import Image

from image_to_pdf.contracts import PixelBuffer, PixelLayout
from image_to_pdf.grayscale import grayscale_reduce


def _pillow_luma(rgb: tuple[int, int, int]) -> int:
    return Image.new("RGB", (1, 1), rgb).convert("L").getpixel((0, 0))


class TestGrayscaleReduce(unittest.TestCase):
    def test_always_single_channel_8bit(self) -> None:
        buffers = [
            PixelBuffer(pixels=np.zeros((3, 4), dtype=np.uint8), layout=PixelLayout.LUMA8),
            PixelBuffer(pixels=np.zeros((3, 4, 3), dtype=np.uint8), layout=PixelLayout.RGB8),
            PixelBuffer(pixels=np.zeros((3, 4, 3), dtype=np.uint16), layout=PixelLayout.RGB16),
            PixelBuffer(pixels=np.zeros((3, 4), dtype=np.uint16), layout=PixelLayout.LUMA16),
            PixelBuffer(pixels=np.zeros((3, 4, 4), dtype=np.uint8), layout=PixelLayout.RGBA8),
            PixelBuffer(pixels=np.zeros((3, 4, 2), dtype=np.uint8), layout=PixelLayout.LUMA_ALPHA8),
            PixelBuffer(pixels=np.zeros((3, 4, 4), dtype=np.uint8), layout=PixelLayout.CMYK8),
        ]
        for buf in buffers:
            with self.subTest(layout=buf.layout):
                out = grayscale_reduce(buf)
                self.assertEqual(out.layout, PixelLayout.LUMA8)
                self.assertEqual(out.channels, 1)
                self.assertEqual(out.pixels.shape, (3, 4))

    def test_uses_pillow_luma_weights(self) -> None:
        colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (100, 150, 200)]
        pixels = np.array([colors], dtype=np.uint8)
        out = grayscale_reduce(PixelBuffer(pixels=pixels, layout=PixelLayout.RGB8))
        self.assertEqual(out.pixels[0].tolist(), [_pillow_luma(c) for c in colors])

    def test_luma8_unchanged(self) -> None:
        buf = PixelBuffer(pixels=np.arange(12, dtype=np.uint8).reshape(3, 4), layout=PixelLayout.LUMA8)
        self.assertEqual(grayscale_reduce(buf), buf)

    def test_rgb16_is_narrowed(self) -> None:
        pixels = np.array([[[65535, 65535, 65535], [0, 0, 0], [257 * 100, 257 * 150, 257 * 200]]], dtype=np.uint16)
        out = grayscale_reduce(PixelBuffer(pixels=pixels, layout=PixelLayout.RGB16))
        self.assertEqual(out.pixels[0].tolist(), [255, 0, _pillow_luma((100, 150, 200))])

    def test_input_not_modified(self) -> None:
        pixels = np.full((2, 2, 3), 7, dtype=np.uint8)
        buf = PixelBuffer(pixels=pixels, layout=PixelLayout.RGB8)
        grayscale_reduce(buf)
        self.assertTrue(np.all(buf.pixels == 7))
        self.assertEqual(buf.layout, PixelLayout.RGB8)


if __name__ == "__main__":
    unittest.main()
