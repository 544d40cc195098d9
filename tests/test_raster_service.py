import unittest
import os
import sys

import numpy as np
from PIL import Image

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from icongen.errors import ConfigurationError
from icongen.services.raster_service import RasterService


def gradient_image(size, alpha=255):
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    ramp = np.linspace(0, 255, size, dtype=np.float32)
    arr[..., 0] = ramp[np.newaxis, :].astype(np.uint8)
    arr[..., 1] = ramp[:, np.newaxis].astype(np.uint8)
    arr[..., 2] = 128
    arr[..., 3] = alpha
    return Image.fromarray(arr)


class TestResize(unittest.TestCase):

    def setUp(self):
        self.raster = RasterService()
        self.source = gradient_image(300)

    def test_resize_is_deterministic(self):
        first = self.raster.resize(self.source, 48)
        second = self.raster.resize(self.source, 48)
        self.assertEqual(first.tobytes(), second.tobytes())

    def test_resize_down_and_up(self):
        self.assertEqual(self.raster.resize(self.source, 16).size, (16, 16))
        self.assertEqual(self.raster.resize(self.source, 1024).size, (1024, 1024))

    def test_resize_returns_rgba_and_leaves_source_alone(self):
        rgb = self.source.convert("RGB")
        before = rgb.tobytes()
        out = self.raster.resize(rgb, 64)
        self.assertEqual(out.mode, "RGBA")
        self.assertEqual(rgb.tobytes(), before)

    def test_same_size_returns_copy(self):
        out = self.raster.resize(self.source, 300)
        self.assertIsNot(out, self.source)
        self.assertEqual(out.tobytes(), self.source.tobytes())

    def test_non_positive_size_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.raster.resize(self.source, 0)
        with self.assertRaises(ConfigurationError):
            self.raster.resize(self.source, -4)


class TestForceOpaque(unittest.TestCase):

    def setUp(self):
        self.raster = RasterService()

    def test_every_pixel_opaque(self):
        icon = gradient_image(40, alpha=90)
        out = self.raster.force_opaque(icon, (0, 0, 255))
        alpha = np.asarray(out)[..., 3]
        self.assertTrue((alpha == 255).all())

    def test_transparent_pixels_become_background(self):
        icon = Image.new("RGBA", (8, 8), (200, 10, 10, 0))
        out = np.asarray(self.raster.force_opaque(icon, (0, 0, 255)))
        self.assertTrue((out[..., :3] == [0, 0, 255]).all())

    def test_opaque_pixels_unchanged(self):
        icon = Image.new("RGBA", (8, 8), (255, 0, 0, 255))
        out = np.asarray(self.raster.force_opaque(icon, (0, 0, 255)))
        self.assertTrue((out == [255, 0, 0, 255]).all())

    def test_partial_alpha_is_blended(self):
        icon = Image.new("RGBA", (4, 4), (255, 255, 255, 128))
        out = np.asarray(self.raster.force_opaque(icon, (0, 0, 0)))
        # 255 * 128/255 + 0 = 128
        self.assertEqual(tuple(out[0, 0]), (128, 128, 128, 255))


class TestCircularMask(unittest.TestCase):

    def test_corners_cleared_center_kept(self):
        raster = RasterService()
        icon = Image.new("RGBA", (48, 48), (10, 200, 30, 255))
        out = np.asarray(raster.apply_circular_mask(icon))
        self.assertEqual(out.shape, (48, 48, 4))
        for y, x in ((0, 0), (0, 47), (47, 0), (47, 47)):
            self.assertEqual(out[y, x, 3], 0)
        self.assertEqual(out[24, 24, 3], 255)
        self.assertEqual(tuple(out[24, 24, :3]), (10, 200, 30))
        # середины сторон лежат на окружности
        self.assertGreater(out[0, 24, 3], 0)
        self.assertGreater(out[24, 0, 3], 0)


if __name__ == '__main__':
    unittest.main()
